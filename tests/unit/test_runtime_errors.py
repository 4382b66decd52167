"""Tests for the runtime error model."""

import pytest

from jiminy.core.errors import ParseError
from jiminy.runtime import BuiltinError, ErrorDomain, ProgramError, as_program_error, define_errors


class VoteError(ErrorDomain):
    InvalidDiscriminator = 6001
    VotingClosed = 6010


class TestProgramError:
    def test_builtin_codes(self) -> None:
        assert ProgramError(BuiltinError.INVALID_ARGUMENT).code == 2 << 32
        assert ProgramError(BuiltinError.INVALID_ACCOUNT_OWNER).code == 23 << 32

    def test_custom_code(self) -> None:
        error = ProgramError.custom(6010)

        assert error.error is None
        assert error.code == 6010
        assert str(error) == "Custom(6010)"

    def test_custom_zero_reports_builtin_code(self) -> None:
        assert ProgramError.custom(0).code == int(BuiltinError.CUSTOM_ZERO)

    @pytest.mark.parametrize("code", [-1, 2**32])
    def test_custom_code_must_fit_u32(self, code: int) -> None:
        with pytest.raises(ValueError):
            ProgramError.custom(code)

    def test_needs_exactly_one_source(self) -> None:
        with pytest.raises(ValueError):
            ProgramError()
        with pytest.raises(ValueError):
            ProgramError(BuiltinError.INVALID_ARGUMENT, custom_code=1)

    def test_equality_by_code(self) -> None:
        assert ProgramError(BuiltinError.INVALID_SEEDS, "one") == ProgramError(
            BuiltinError.INVALID_SEEDS, "two"
        )
        assert ProgramError.custom(1) != ProgramError.custom(2)

    def test_message(self) -> None:
        assert str(ProgramError(BuiltinError.INVALID_SEEDS)) == "INVALID_SEEDS"
        assert str(ProgramError(BuiltinError.INVALID_SEEDS, "bad bump")) == "bad bump"


class TestErrorDomain:
    def test_into(self) -> None:
        error = VoteError.VotingClosed.into()

        assert error.custom_code == 6010
        assert "VoteError.VotingClosed" in str(error)

    def test_as_program_error(self) -> None:
        ready = ProgramError.custom(5)

        assert as_program_error(ready) is ready
        assert as_program_error(VoteError.VotingClosed).code == 6010
        assert as_program_error(BuiltinError.INVALID_SEEDS).error is BuiltinError.INVALID_SEEDS

    def test_define_errors_adds_reserved_variant(self) -> None:
        domain = define_errors("PollError,\nPollClosed = 6100,")

        assert domain.__name__ == "PollError"
        assert domain.InvalidDiscriminator == 6001
        assert domain.PollClosed.into().code == 6100

    def test_define_errors_is_strict(self) -> None:
        with pytest.raises(ParseError):
            define_errors("PollError,\nA = 1,\nB = 1,")
