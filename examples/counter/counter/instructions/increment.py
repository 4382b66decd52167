from jiminy.runtime import assert_pda, define_instruction, load_mut

from ..error import CounterProgramError
from ..state import COUNTER_SEED, Counter

U64_MAX = 2**64 - 1


@define_instruction("""
    discriminant: 1,
    Increment,
    accounts: {
        owner: signer, desc: "Owner of the counter",
        counter: program => writable, desc: "Counter PDA to increment",
    },
    data: {},
""")
def increment(ctx):
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
        # saturating
        state.count = min(state.count + 1, U64_MAX)
