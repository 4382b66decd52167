"""
Runtime error model.

Every failed check raises ``ProgramError`` carrying the numeric code the
host reports to clients. Builtin errors use the host's reserved u64 codes;
program-defined errors are ``Custom(code)`` with a u32 code.
"""

from __future__ import annotations

from enum import IntEnum

from jiminy.core.error_parser import parse_error_table


class BuiltinError(IntEnum):
    """Host-reserved error codes, as reported on the wire."""

    CUSTOM_ZERO = 1 << 32
    INVALID_ARGUMENT = 2 << 32
    INVALID_INSTRUCTION_DATA = 3 << 32
    INVALID_ACCOUNT_DATA = 4 << 32
    ACCOUNT_DATA_TOO_SMALL = 5 << 32
    INSUFFICIENT_FUNDS = 6 << 32
    INCORRECT_PROGRAM_ID = 7 << 32
    MISSING_REQUIRED_SIGNATURE = 8 << 32
    ACCOUNT_ALREADY_INITIALIZED = 9 << 32
    UNINITIALIZED_ACCOUNT = 10 << 32
    NOT_ENOUGH_ACCOUNT_KEYS = 11 << 32
    ACCOUNT_BORROW_FAILED = 12 << 32
    MAX_SEED_LENGTH_EXCEEDED = 13 << 32
    INVALID_SEEDS = 14 << 32
    ILLEGAL_OWNER = 18 << 32
    INVALID_ACCOUNT_OWNER = 23 << 32
    ARITHMETIC_OVERFLOW = 24 << 32


class ProgramError(Exception):
    """
    A failed instruction.

    Attributes:
        error: The builtin error, or None for program-defined errors
        custom_code: The program-defined u32 code, or None for builtin errors
    """

    def __init__(
        self,
        error: BuiltinError | None = None,
        message: str | None = None,
        *,
        custom_code: int | None = None,
    ) -> None:
        if (error is None) == (custom_code is None):
            raise ValueError("ProgramError needs exactly one of error or custom_code")
        self.error = error
        self.custom_code = custom_code
        super().__init__(message or self._default_message())

    @classmethod
    def custom(cls, code: int, message: str | None = None) -> ProgramError:
        if not 0 <= code <= 0xFFFF_FFFF:
            raise ValueError(f"custom error code {code} does not fit in u32")
        return cls(custom_code=code, message=message)

    @property
    def code(self) -> int:
        """The u64 code reported to clients."""
        if self.error is not None:
            return int(self.error)
        assert self.custom_code is not None
        return self.custom_code if self.custom_code else int(BuiltinError.CUSTOM_ZERO)

    def _default_message(self) -> str:
        if self.error is not None:
            return self.error.name
        return f"Custom({self.custom_code})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProgramError):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def __repr__(self) -> str:
        return f"ProgramError({self._default_message()})"


class ErrorDomain(IntEnum):
    """Base for program error enums; members convert to ``ProgramError``."""

    def into(self) -> ProgramError:
        return ProgramError.custom(int(self), f"{type(self).__name__}.{self.name}")

    def __str__(self) -> str:
        return self.name


ErrorLike = ProgramError | ErrorDomain | BuiltinError


def as_program_error(error: ErrorLike) -> ProgramError:
    """Normalise a builtin, program-defined or ready-made error."""
    if isinstance(error, ProgramError):
        return error
    if isinstance(error, ErrorDomain):
        return error.into()
    return ProgramError(error)


def define_errors(declaration: str) -> type[ErrorDomain]:
    """
    Build a program error enum from an error table declaration.

    The reserved ``InvalidDiscriminator`` variant is added when missing.

    Raises:
        ParseError: If the table is malformed or empty
    """
    domain = parse_error_table(declaration, strict=True)
    assert domain is not None
    domain = domain.with_reserved_variant()
    return ErrorDomain(domain.name, [(v.name, v.code) for v in domain.variants])
