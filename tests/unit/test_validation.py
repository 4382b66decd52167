"""Tests for account capability validation."""

import pytest

from jiminy.core.ir import AccountSlot, Capability
from jiminy.runtime import (
    CAPABILITY_RULES,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    BuiltinError,
    ProgramError,
    validate_account,
    validate_accounts,
)


def _slot(capability: Capability, writable: bool = False, index: int = 0) -> AccountSlot:
    return AccountSlot(
        name=f"slot{index}",
        capability=capability,
        writable=writable,
        index=index,
    )


def _error(account, slot, program_id) -> BuiltinError:
    with pytest.raises(ProgramError) as exc_info:
        validate_account(account, slot, program_id)
    return exc_info.value.error


class TestCapabilityRules:
    def test_every_capability_has_a_rule(self) -> None:
        assert set(CAPABILITY_RULES) == set(Capability)

    def test_signer(self, make_account, program_id) -> None:
        slot = _slot(Capability.SIGNER)

        validate_account(make_account(is_signer=True), slot, program_id)
        assert _error(make_account(), slot, program_id) is BuiltinError.MISSING_REQUIRED_SIGNATURE

    def test_program_owned(self, make_account, program_id) -> None:
        slot = _slot(Capability.PROGRAM)

        validate_account(make_account(owner=program_id, lamports=1), slot, program_id)
        assert (
            _error(make_account(lamports=1), slot, program_id)
            is BuiltinError.INVALID_ACCOUNT_OWNER
        )
        assert (
            _error(make_account(owner=program_id), slot, program_id)
            is BuiltinError.UNINITIALIZED_ACCOUNT
        )

    def test_uninitialized(self, make_account, program_id) -> None:
        slot = _slot(Capability.UNINITIALIZED)

        validate_account(make_account(is_writable=True), slot, program_id)
        assert (
            _error(make_account(owner=program_id, is_writable=True), slot, program_id)
            is BuiltinError.INVALID_ACCOUNT_OWNER
        )

    @pytest.mark.parametrize("owned_by_program", [True, False])
    def test_funded_account_is_already_initialized(
        self, make_account, program_id, owned_by_program: bool
    ) -> None:
        owner = program_id if owned_by_program else SYSTEM_PROGRAM_ID
        account = make_account(owner=owner, lamports=1, is_writable=True)

        assert (
            _error(account, _slot(Capability.UNINITIALIZED), program_id)
            is BuiltinError.ACCOUNT_ALREADY_INITIALIZED
        )

    def test_uninitialized_must_be_writable(self, make_account, program_id) -> None:
        assert (
            _error(make_account(), _slot(Capability.UNINITIALIZED), program_id)
            is BuiltinError.INVALID_ACCOUNT_DATA
        )

    def test_token(self, make_account, program_id) -> None:
        slot = _slot(Capability.TOKEN)

        validate_account(make_account(owner=TOKEN_PROGRAM_ID, lamports=1), slot, program_id)
        assert _error(make_account(lamports=1), slot, program_id) is BuiltinError.INVALID_ACCOUNT_OWNER
        assert (
            _error(make_account(owner=TOKEN_PROGRAM_ID), slot, program_id)
            is BuiltinError.UNINITIALIZED_ACCOUNT
        )

    def test_not_token(self, make_account, program_id) -> None:
        slot = _slot(Capability.NOT_TOKEN)

        validate_account(make_account(owner=program_id), slot, program_id)
        assert (
            _error(make_account(owner=TOKEN_PROGRAM_ID), slot, program_id)
            is BuiltinError.INVALID_ACCOUNT_OWNER
        )

    def test_any(self, make_account, program_id) -> None:
        validate_account(make_account(owner=TOKEN_PROGRAM_ID), _slot(Capability.ANY), program_id)

    def test_writable_flag(self, make_account, program_id) -> None:
        slot = _slot(Capability.SIGNER, writable=True)

        validate_account(make_account(is_signer=True, is_writable=True), slot, program_id)
        assert (
            _error(make_account(is_signer=True), slot, program_id)
            is BuiltinError.INVALID_ACCOUNT_DATA
        )


class TestValidateAccounts:
    def test_too_few_accounts(self, make_account, program_id) -> None:
        slots = [_slot(Capability.ANY, index=0), _slot(Capability.ANY, index=1)]

        with pytest.raises(ProgramError) as exc_info:
            validate_accounts([make_account()], slots, program_id)

        assert exc_info.value.error is BuiltinError.NOT_ENOUGH_ACCOUNT_KEYS

    def test_extra_accounts_are_ignored(self, make_account, program_id) -> None:
        validate_accounts(
            [make_account(is_signer=True), make_account()],
            [_slot(Capability.SIGNER)],
            program_id,
        )

    def test_first_failure_wins(self, make_account, program_id) -> None:
        slots = [_slot(Capability.SIGNER, index=0), _slot(Capability.PROGRAM, index=1)]

        with pytest.raises(ProgramError) as exc_info:
            validate_accounts([make_account(), make_account()], slots, program_id)

        assert exc_info.value.error is BuiltinError.MISSING_REQUIRED_SIGNATURE


class TestCustomPredicate:
    def _custom(self, predicate: str = "is_funded") -> AccountSlot:
        return AccountSlot(
            name="vault", capability=Capability.CUSTOM, index=0, predicate=predicate
        )

    def test_passing_predicate(self, make_account, program_id) -> None:
        predicates = {"is_funded": lambda account: account.lamports > 0}

        validate_account(make_account(lamports=5), self._custom(), program_id, predicates)

    def test_failing_predicate(self, make_account, program_id) -> None:
        predicates = {"is_funded": lambda account: account.lamports > 0}

        with pytest.raises(ProgramError) as exc_info:
            validate_account(make_account(), self._custom(), program_id, predicates)

        assert exc_info.value.error is BuiltinError.INVALID_ACCOUNT_DATA

    def test_missing_predicate(self, make_account, program_id) -> None:
        assert _error(make_account(lamports=5), self._custom(), program_id) is (
            BuiltinError.INVALID_ACCOUNT_DATA
        )

    def test_predicate_runs_in_slot_order(self, make_account, program_id) -> None:
        seen: list[str] = []
        slots = [_slot(Capability.SIGNER, index=0), self._custom()]

        with pytest.raises(ProgramError) as exc_info:
            validate_accounts(
                [make_account(), make_account()],
                slots,
                program_id,
                {"is_funded": lambda account: seen.append("called") or True},
            )

        assert exc_info.value.error is BuiltinError.MISSING_REQUIRED_SIGNATURE
        assert seen == []
