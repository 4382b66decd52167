"""
Capability validation.

Each account slot is checked against exactly one rule from
``CAPABILITY_RULES`` before any payload byte is decoded. Slots are checked
in declared order and the first failure aborts the instruction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType

from jiminy.core.ir import AccountSlot, Capability

from .account import AccountInfo
from .errors import BuiltinError, ProgramError
from .pubkey import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, Pubkey

logger = logging.getLogger(__name__)

CapabilityRule = Callable[[AccountInfo, Pubkey], None]
AccountPredicate = Callable[[AccountInfo], bool]


def _fail(error: BuiltinError, account: AccountInfo, reason: str) -> ProgramError:
    return ProgramError(error, f"account {account.key}: {reason}")


def check_signer(account: AccountInfo, program_id: Pubkey) -> None:
    if not account.is_signer:
        raise _fail(BuiltinError.MISSING_REQUIRED_SIGNATURE, account, "missing signature")


def check_program_owned(account: AccountInfo, program_id: Pubkey) -> None:
    if not account.is_owned_by(program_id):
        raise _fail(BuiltinError.INVALID_ACCOUNT_OWNER, account, "not owned by this program")
    if account.lamports == 0:
        raise _fail(BuiltinError.UNINITIALIZED_ACCOUNT, account, "not initialized")


def check_uninitialized(account: AccountInfo, program_id: Pubkey) -> None:
    # balance first: a funded account is initialized whoever owns it
    if account.lamports != 0:
        raise _fail(BuiltinError.ACCOUNT_ALREADY_INITIALIZED, account, "already initialized")
    if not account.is_owned_by(SYSTEM_PROGRAM_ID):
        raise _fail(BuiltinError.INVALID_ACCOUNT_OWNER, account, "not owned by the system program")


def check_token_owned(account: AccountInfo, program_id: Pubkey) -> None:
    if not account.is_owned_by(TOKEN_PROGRAM_ID):
        raise _fail(BuiltinError.INVALID_ACCOUNT_OWNER, account, "not owned by the token program")
    if account.lamports == 0:
        raise _fail(BuiltinError.UNINITIALIZED_ACCOUNT, account, "token account not initialized")


def check_not_token_owned(account: AccountInfo, program_id: Pubkey) -> None:
    if account.is_owned_by(TOKEN_PROGRAM_ID):
        raise _fail(BuiltinError.INVALID_ACCOUNT_OWNER, account, "owned by the token program")


def check_any(account: AccountInfo, program_id: Pubkey) -> None:
    return None


CAPABILITY_RULES: Mapping[Capability, CapabilityRule] = MappingProxyType(
    {
        Capability.SIGNER: check_signer,
        Capability.PROGRAM: check_program_owned,
        Capability.UNINITIALIZED: check_uninitialized,
        Capability.TOKEN: check_token_owned,
        Capability.NOT_TOKEN: check_not_token_owned,
        Capability.ANY: check_any,
        Capability.CUSTOM: check_any,
    }
)


def requires_writable(slot: AccountSlot) -> bool:
    return slot.writable or slot.capability is Capability.UNINITIALIZED


def check_predicate(
    account: AccountInfo,
    slot: AccountSlot,
    predicates: Mapping[str, AccountPredicate],
) -> None:
    predicate = predicates.get(slot.predicate or "")
    if predicate is None:
        raise _fail(
            BuiltinError.INVALID_ACCOUNT_DATA, account, f"no predicate named '{slot.predicate}'"
        )
    if not predicate(account):
        raise _fail(
            BuiltinError.INVALID_ACCOUNT_DATA, account, f"{slot.predicate} rejected {slot.name}"
        )


def validate_account(
    account: AccountInfo,
    slot: AccountSlot,
    program_id: Pubkey,
    predicates: Mapping[str, AccountPredicate] | None = None,
) -> None:
    """
    Check one account against its slot.

    ``custom(name)`` slots look ``name`` up in ``predicates``; a missing or
    failing predicate is INVALID_ACCOUNT_DATA.

    Raises:
        ProgramError: With the failing rule's builtin error
    """
    CAPABILITY_RULES[slot.capability](account, program_id)
    if slot.capability is Capability.CUSTOM:
        check_predicate(account, slot, predicates or {})
    if requires_writable(slot) and not account.is_writable:
        raise _fail(BuiltinError.INVALID_ACCOUNT_DATA, account, f"{slot.name} must be writable")


def validate_accounts(
    accounts: Sequence[AccountInfo],
    slots: Sequence[AccountSlot],
    program_id: Pubkey,
    predicates: Mapping[str, AccountPredicate] | None = None,
) -> None:
    """Check accounts against slots in order; extra trailing accounts are ignored."""
    if len(accounts) < len(slots):
        raise ProgramError(
            BuiltinError.NOT_ENOUGH_ACCOUNT_KEYS,
            f"expected {len(slots)} accounts, got {len(accounts)}",
        )
    for slot, account in zip(slots, accounts):
        try:
            validate_account(account, slot, program_id, predicates)
        except ProgramError as e:
            logger.debug("Slot %d (%s) failed: %s", slot.index, slot.name, e)
            raise
