"""
Jiminy runtime: what program modules and generated dispatch code import.

Capability validation, PDA checks, zero-copy state access and account
lifecycle helpers, plus the declaration helpers ``define_instruction``,
``define_errors`` and ``define_state``.
"""

from .account import AccountInfo
from .errors import (
    BuiltinError,
    ErrorDomain,
    ErrorLike,
    ProgramError,
    as_program_error,
    define_errors,
)
from .instruction import (
    AccountMeta,
    FieldMeta,
    InstructionContext,
    InstructionHandler,
    ProgramInstruction,
    define_instruction,
    resolve_handler,
)
from .lifecycle import (
    Rent,
    TokenAccount,
    TokenError,
    close_account,
    create_account,
    create_pda,
    is_closed,
    transfer_sol,
    transfer_tokens,
)
from .pda import (
    PdaCheck,
    assert_pda,
    create_program_address,
    derive_address,
    find_program_address,
    validate_pdas,
)
from .pubkey import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, Pubkey
from .state import RecordLayout, RecordView, define_state, load, load_mut
from .validation import CAPABILITY_RULES, AccountPredicate, validate_account, validate_accounts

__all__ = [
    # Accounts & keys
    "AccountInfo",
    "Pubkey",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    # Errors
    "BuiltinError",
    "ErrorDomain",
    "ErrorLike",
    "ProgramError",
    "as_program_error",
    "define_errors",
    # Instructions
    "AccountMeta",
    "FieldMeta",
    "InstructionContext",
    "InstructionHandler",
    "ProgramInstruction",
    "define_instruction",
    "resolve_handler",
    # Validation
    "CAPABILITY_RULES",
    "AccountPredicate",
    "validate_account",
    "validate_accounts",
    # PDA
    "PdaCheck",
    "assert_pda",
    "create_program_address",
    "derive_address",
    "find_program_address",
    "validate_pdas",
    # State
    "RecordLayout",
    "RecordView",
    "define_state",
    "load",
    "load_mut",
    # Lifecycle
    "Rent",
    "TokenAccount",
    "TokenError",
    "close_account",
    "create_account",
    "create_pda",
    "is_closed",
    "transfer_sol",
    "transfer_tokens",
]
