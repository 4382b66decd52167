from jiminy.runtime import create_pda, define_instruction, find_program_address, load_mut

from ..error import CounterProgramError
from ..state import COUNTER_SEED, Counter


@define_instruction("""
    discriminant: 0,
    InitializeCounter,
    accounts: {
        owner: signer => writable, desc: "Owner of the counter",
        counter: uninitialized, desc: "Counter PDA to be initialized",
        system_program: any, desc: "System program",
    },
    data: {
        start: u64,
    },
""")
def initialize_counter(ctx):
    owner = ctx.accounts.owner
    counter = ctx.accounts.counter

    seeds = [COUNTER_SEED, owner.key]
    counter_pda, bump = find_program_address(seeds, ctx.program_id)
    if counter.key != counter_pda:
        raise CounterProgramError.CounterKeyIncorrect.into()

    create_pda(owner, counter, Counter.LEN, seeds, bump, ctx.program_id)

    with load_mut(counter, Counter) as state:
        state.owner = owner.key
        state.count = ctx.data.start
        state.bump = bump
