"""
Account lifecycle: creation, value transfer and closure.

Each effect is authorized either by a transaction signature or, for
program-derived addresses, by the seeds that derive the authority's key.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .account import AccountInfo
from .errors import BuiltinError, ErrorDomain, ProgramError
from .pda import Seed, create_program_address
from .pubkey import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, Pubkey
from .state import RecordLayout, RecordView, load, load_mut

logger = logging.getLogger(__name__)

CLOSED_ACCOUNT_TOMBSTONE = 0xFF


@dataclass(frozen=True)
class Rent:
    """
    Rent parameters.

    Attributes:
        lamports_per_byte_year: Rent charged per byte per year
        exemption_threshold: Years of rent an account must hold to be exempt
        storage_overhead: Bytes charged on top of the account's data
    """

    lamports_per_byte_year: int = 3480
    exemption_threshold: float = 2.0
    storage_overhead: int = 128

    @classmethod
    def default(cls) -> Rent:
        return cls()

    def minimum_balance(self, data_len: int) -> int:
        """Lamports an account of ``data_len`` bytes needs to be rent-exempt."""
        bytes_charged = self.storage_overhead + data_len
        return int(bytes_charged * self.lamports_per_byte_year * self.exemption_threshold)


def _authorize(
    authority: AccountInfo,
    signer_seeds: Sequence[Seed] | None,
    program_id: Pubkey | None,
) -> None:
    if authority.is_signer:
        return
    if signer_seeds is None:
        raise ProgramError(
            BuiltinError.MISSING_REQUIRED_SIGNATURE, f"{authority.key} did not sign"
        )
    if program_id is None:
        raise ProgramError(BuiltinError.INCORRECT_PROGRAM_ID, "seeds given without a program id")
    if create_program_address(signer_seeds, program_id) != authority.key:
        raise ProgramError(
            BuiltinError.INVALID_SEEDS, f"seeds do not derive {authority.key}"
        )


def create_account(
    payer: AccountInfo,
    new_account: AccountInfo,
    space: int,
    program_id: Pubkey,
    signer_seeds: Sequence[Seed] | None = None,
    rent: Rent | None = None,
) -> None:
    """
    Allocate ``space`` zeroed bytes for ``new_account``, fund it to the
    rent-exempt minimum from ``payer`` and hand ownership to ``program_id``.

    ``signer_seeds`` (bump included) authorize a PDA that cannot sign.

    Raises:
        ProgramError: MISSING_REQUIRED_SIGNATURE, INVALID_SEEDS,
            ACCOUNT_ALREADY_INITIALIZED or INSUFFICIENT_FUNDS
    """
    if not payer.is_signer:
        raise ProgramError(BuiltinError.MISSING_REQUIRED_SIGNATURE, f"payer {payer.key} did not sign")
    _authorize(new_account, signer_seeds, program_id)

    if new_account.lamports != 0 or new_account.data_len != 0:
        raise ProgramError(
            BuiltinError.ACCOUNT_ALREADY_INITIALIZED, f"{new_account.key} already in use"
        )
    if not new_account.is_owned_by(SYSTEM_PROGRAM_ID):
        raise ProgramError(
            BuiltinError.ACCOUNT_ALREADY_INITIALIZED, f"{new_account.key} already assigned"
        )

    lamports = (rent or Rent.default()).minimum_balance(space)
    if payer.lamports < lamports:
        raise ProgramError(
            BuiltinError.INSUFFICIENT_FUNDS,
            f"payer holds {payer.lamports} lamports, {lamports} required",
        )

    payer.lamports -= lamports
    new_account.lamports += lamports
    new_account.resize(space)
    new_account.assign(program_id)
    logger.debug("Created %s (%d bytes, %d lamports)", new_account.key, space, lamports)


def create_pda(
    payer: AccountInfo,
    new_account: AccountInfo,
    space: int,
    seeds: Sequence[Seed],
    bump: int,
    program_id: Pubkey,
    rent: Rent | None = None,
) -> None:
    """``create_account`` for a program-derived address with a known bump."""
    create_account(
        payer,
        new_account,
        space,
        program_id,
        signer_seeds=[*seeds, bytes([bump])],
        rent=rent,
    )


def transfer_sol(
    source: AccountInfo,
    destination: AccountInfo,
    amount: int,
    signer_seeds: Sequence[Seed] | None = None,
    program_id: Pubkey | None = None,
) -> None:
    """
    Move native balance out of a system-owned account.

    Raises:
        ProgramError: INVALID_ARGUMENT, INVALID_ACCOUNT_OWNER,
            MISSING_REQUIRED_SIGNATURE, INVALID_SEEDS or INSUFFICIENT_FUNDS
    """
    if amount < 0:
        raise ProgramError(BuiltinError.INVALID_ARGUMENT, "negative transfer amount")
    if not source.is_owned_by(SYSTEM_PROGRAM_ID):
        raise ProgramError(
            BuiltinError.INVALID_ACCOUNT_OWNER, f"{source.key} is not system-owned"
        )
    _authorize(source, signer_seeds, program_id)
    if source.lamports < amount:
        raise ProgramError(
            BuiltinError.INSUFFICIENT_FUNDS,
            f"{source.key} holds {source.lamports} lamports, {amount} requested",
        )
    source.lamports -= amount
    destination.lamports += amount


class TokenAccount(RecordLayout):
    """SPL token account layout."""

    FIELDS = (
        ("mint", "Pubkey"),
        ("owner", "Pubkey"),
        ("amount", "u64"),
        ("delegate_option", "[u8; 4]"),
        ("delegate", "Pubkey"),
        ("state", "u8"),
        ("is_native_option", "[u8; 4]"),
        ("is_native", "u64"),
        ("delegated_amount", "u64"),
        ("close_authority_option", "[u8; 4]"),
        ("close_authority", "Pubkey"),
    )


class TokenAccountState:
    UNINITIALIZED = 0
    INITIALIZED = 1
    FROZEN = 2


class TokenError(ErrorDomain):
    InsufficientFunds = 1
    MintMismatch = 3
    OwnerMismatch = 4
    AccountFrozen = 17


def _check_token_account(account: AccountInfo) -> None:
    if not account.is_owned_by(TOKEN_PROGRAM_ID):
        raise ProgramError(
            BuiltinError.INVALID_ACCOUNT_OWNER, f"{account.key} is not a token account"
        )


def transfer_tokens(
    source: AccountInfo,
    destination: AccountInfo,
    authority: AccountInfo,
    amount: int,
    signer_seeds: Sequence[Seed] | None = None,
    program_id: Pubkey | None = None,
) -> None:
    """
    Move ``amount`` tokens between two accounts of the same mint.

    ``authority`` must be the source account's owner and must sign, or be
    the PDA derived from ``signer_seeds``.

    Raises:
        ProgramError: Builtin account errors or a ``TokenError``
    """
    if amount < 0:
        raise ProgramError(BuiltinError.INVALID_ARGUMENT, "negative transfer amount")
    _check_token_account(source)
    _check_token_account(destination)
    _authorize(authority, signer_seeds, program_id)

    if source is destination:
        with load(source, TokenAccount) as token:
            _check_transfer(token, token, authority, amount)
        return

    with load_mut(source, TokenAccount) as src, load_mut(destination, TokenAccount) as dst:
        _check_transfer(src, dst, authority, amount)
        src.amount -= amount
        dst.amount += amount
    logger.debug("Moved %d tokens %s -> %s", amount, source.key, destination.key)


def _check_transfer(src: RecordView, dst: RecordView, authority: AccountInfo, amount: int) -> None:
    for token in (src, dst):
        if token.state == TokenAccountState.UNINITIALIZED:
            raise ProgramError(BuiltinError.UNINITIALIZED_ACCOUNT, "token account not initialized")
        if token.state == TokenAccountState.FROZEN:
            raise TokenError.AccountFrozen.into()
    if src.mint != dst.mint:
        raise TokenError.MintMismatch.into()
    if src.owner != bytes(authority.key):
        raise TokenError.OwnerMismatch.into()
    if src.amount < amount:
        raise TokenError.InsufficientFunds.into()


def close_account(account: AccountInfo, beneficiary: AccountInfo) -> None:
    """
    Close ``account``: move its whole balance to ``beneficiary``, leave a
    single tombstone byte and return ownership to the system program.
    """
    if account is beneficiary or account.key == beneficiary.key:
        raise ProgramError(BuiltinError.INVALID_ARGUMENT, "cannot close an account into itself")

    # storage first: a borrowed account fails here with nothing moved
    account.resize(1)
    with account.borrow_mut_data() as data:
        data[0] = CLOSED_ACCOUNT_TOMBSTONE
    beneficiary.lamports += account.lamports
    account.lamports = 0
    account.assign(SYSTEM_PROGRAM_ID)
    logger.debug("Closed %s into %s", account.key, beneficiary.key)


def is_closed(account: AccountInfo) -> bool:
    return account.data_len == 1 and account.data[0] == CLOSED_ACCOUNT_TOMBSTONE
