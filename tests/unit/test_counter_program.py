"""End-to-end tests for the counter example through its generated dispatch."""

import pytest

from counter.generated import (
    PROGRAM_ID,
    PROGRAM_INSTRUCTIONS,
    Counter,
    CounterProgramError,
    ProgramInstructions,
    process_instruction,
)
from jiminy.runtime import (
    SYSTEM_PROGRAM_ID,
    BuiltinError,
    ProgramError,
    Pubkey,
    Rent,
    find_program_address,
    is_closed,
    load,
)

SOL = 1_000_000_000


@pytest.fixture
def owner(make_account):
    return make_account(is_signer=True, is_writable=True, lamports=SOL)


@pytest.fixture
def counter(make_account, owner):
    address, _ = find_program_address([b"counter", owner.key], PROGRAM_ID)
    return make_account(key=address, is_writable=True)


@pytest.fixture
def system_program(make_account):
    return make_account(key=SYSTEM_PROGRAM_ID, executable=True)


@pytest.fixture
def initialized(owner, counter, system_program):
    process_instruction(
        PROGRAM_ID,
        [owner, counter, system_program],
        ProgramInstructions.InitializeCounter.pack(start=5),
    )
    return counter


def _count(account) -> int:
    with load(account, Counter) as state:
        return state.count


def _invoke(instruction, *accounts, **values) -> None:
    process_instruction(PROGRAM_ID, list(accounts), instruction.pack(**values))


def _custom_code(exc_info) -> int | None:
    return exc_info.value.custom_code


class TestInitialize:
    def test_creates_counter(self, owner, initialized) -> None:
        assert initialized.owner == PROGRAM_ID
        assert initialized.lamports == Rent.default().minimum_balance(Counter.LEN)
        assert owner.lamports == SOL - initialized.lamports
        with load(initialized, Counter) as state:
            assert state.owner == bytes(owner.key)
            assert state.count == 5

    def test_wrong_counter_address(self, owner, make_account, system_program) -> None:
        impostor = make_account(is_writable=True)

        with pytest.raises(ProgramError) as exc_info:
            _invoke(ProgramInstructions.InitializeCounter, owner, impostor, system_program, start=0)

        assert exc_info.value == CounterProgramError.CounterKeyIncorrect.into()

    def test_twice_fails(self, owner, initialized, system_program) -> None:
        with pytest.raises(ProgramError) as exc_info:
            _invoke(
                ProgramInstructions.InitializeCounter, owner, initialized, system_program, start=0
            )

        assert exc_info.value.error is BuiltinError.ACCOUNT_ALREADY_INITIALIZED

    def test_owner_must_sign(self, make_account, counter, system_program) -> None:
        owner = make_account(is_writable=True, lamports=SOL)

        with pytest.raises(ProgramError) as exc_info:
            _invoke(ProgramInstructions.InitializeCounter, owner, counter, system_program, start=0)

        assert exc_info.value.error is BuiltinError.MISSING_REQUIRED_SIGNATURE


class TestIncrementDecrement:
    def test_increment(self, owner, initialized) -> None:
        _invoke(ProgramInstructions.Increment, owner, initialized)
        _invoke(ProgramInstructions.Increment, owner, initialized)

        assert _count(initialized) == 7

    def test_decrement(self, owner, initialized) -> None:
        _invoke(ProgramInstructions.Decrement, owner, initialized)

        assert _count(initialized) == 4

    def test_decrement_underflow(self, owner, counter, system_program) -> None:
        _invoke(ProgramInstructions.InitializeCounter, owner, counter, system_program, start=0)

        with pytest.raises(ProgramError) as exc_info:
            _invoke(ProgramInstructions.Decrement, owner, counter)

        assert _custom_code(exc_info) == CounterProgramError.CounterUnderflow
        assert _count(counter) == 0

    def test_increment_saturates(self, owner, counter, system_program) -> None:
        _invoke(
            ProgramInstructions.InitializeCounter, owner, counter, system_program, start=2**64 - 1
        )

        _invoke(ProgramInstructions.Increment, owner, counter)

        assert _count(counter) == 2**64 - 1

    def test_other_signer_is_unauthorized(self, make_account, initialized) -> None:
        stranger = make_account(is_signer=True)

        with pytest.raises(ProgramError) as exc_info:
            _invoke(ProgramInstructions.Increment, stranger, initialized)

        assert _custom_code(exc_info) == CounterProgramError.Unauthorized

    def test_counter_must_be_program_owned(self, owner, make_account) -> None:
        foreign = make_account(is_writable=True, lamports=1, data=bytes(Counter.LEN))

        with pytest.raises(ProgramError) as exc_info:
            _invoke(ProgramInstructions.Increment, owner, foreign)

        assert exc_info.value.error is BuiltinError.INVALID_ACCOUNT_OWNER


class TestClose:
    def test_close_returns_balance(self, owner, initialized) -> None:
        before = owner.lamports + initialized.lamports

        _invoke(ProgramInstructions.CloseCounter, owner, initialized)

        assert owner.lamports == before
        assert initialized.lamports == 0
        assert is_closed(initialized)
        assert initialized.owner == SYSTEM_PROGRAM_ID

    def test_closed_counter_rejects_increment(self, owner, initialized) -> None:
        _invoke(ProgramInstructions.CloseCounter, owner, initialized)

        with pytest.raises(ProgramError) as exc_info:
            _invoke(ProgramInstructions.Increment, owner, initialized)

        assert exc_info.value.error is BuiltinError.INVALID_ACCOUNT_OWNER


class TestDispatch:
    def test_instruction_table(self) -> None:
        assert [cls.NAME for cls in PROGRAM_INSTRUCTIONS.values()] == [
            "InitializeCounter",
            "Increment",
            "Decrement",
            "CloseCounter",
        ]

    @pytest.mark.parametrize("data", [b"", b"\x04", b"\xff"])
    def test_unknown_discriminator(self, data: bytes) -> None:
        with pytest.raises(ProgramError) as exc_info:
            process_instruction(PROGRAM_ID, [], data)

        assert _custom_code(exc_info) == CounterProgramError.InvalidDiscriminator

    def test_foreign_program_id(self) -> None:
        with pytest.raises(ProgramError) as exc_info:
            process_instruction(Pubkey.new_unique(), [], b"\x01")

        assert exc_info.value.error is BuiltinError.INCORRECT_PROGRAM_ID

    def test_missing_accounts(self, owner) -> None:
        with pytest.raises(ProgramError) as exc_info:
            process_instruction(PROGRAM_ID, [owner], b"\x01")

        assert exc_info.value.error is BuiltinError.NOT_ENOUGH_ACCOUNT_KEYS

    def test_payload_on_empty_instruction(self, owner, initialized) -> None:
        with pytest.raises(ProgramError) as exc_info:
            process_instruction(PROGRAM_ID, [owner, initialized], b"\x01\x00")

        assert exc_info.value.error is BuiltinError.INVALID_INSTRUCTION_DATA
        assert _count(initialized) == 5
