from jiminy.runtime import define_state

COUNTER_SEED = b"counter"

STATE = define_state(
    """
    struct Counter {
        owner: [u8; 32],
        count: u64,
        bump: u8,
    }
    """,
    module=__name__,
)

Counter = STATE["Counter"]
