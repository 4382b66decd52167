from jiminy.runtime import assert_pda, define_instruction, load_mut

from ..error import CounterProgramError
from ..state import COUNTER_SEED, Counter


@define_instruction("""
    discriminant: 2,
    Decrement,
    accounts: {
        owner: signer, desc: "Owner of the counter",
        counter: program => writable, desc: "Counter PDA to decrement",
    },
    data: {},
""")
def decrement(ctx):
    owner = ctx.accounts.owner
    counter = ctx.accounts.counter

    with load_mut(counter, Counter) as state:
        if state.owner != bytes(owner.key):
            raise CounterProgramError.Unauthorized.into()
        assert_pda(
            counter,
            [COUNTER_SEED, owner.key],
            state.bump,
            ctx.program_id,
            CounterProgramError.CounterKeyIncorrect,
        )
        if state.count == 0:
            raise CounterProgramError.CounterUnderflow.into()
        state.count -= 1
