from jiminy.runtime import define_errors

CounterProgramError = define_errors("""
    CounterProgramError,
    InvalidDiscriminator = 6001,
    Unauthorized = 6002,
    CounterKeyIncorrect = 6003,
    CounterAlreadyInitialized = 6004,
    CounterNotInitialized = 6005,
    CounterUnderflow = 6006,
""")
