from jiminy.runtime import assert_pda, close_account, define_instruction, load

from ..error import CounterProgramError
from ..state import COUNTER_SEED, Counter


@define_instruction("""
    discriminant: 3,
    CloseCounter,
    accounts: {
        owner: signer => writable, desc: "Owner receiving the counter's balance",
        counter: program => writable, desc: "Counter PDA to close",
    },
    data: {},
""")
def close_counter(ctx):
    owner = ctx.accounts.owner
    counter = ctx.accounts.counter

    with load(counter, Counter) as state:
        if state.owner != bytes(owner.key):
            raise CounterProgramError.Unauthorized.into()
        bump = state.bump

    assert_pda(
        counter,
        [COUNTER_SEED, owner.key],
        bump,
        ctx.program_id,
        CounterProgramError.CounterKeyIncorrect,
    )
    close_account(counter, owner)
