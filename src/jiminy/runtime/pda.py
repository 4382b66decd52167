"""
Program-derived addresses.

A PDA is ``sha256(seeds || bump || program_id || "ProgramDerivedAddress")``
that does not lie on the ed25519 curve. ``derive_address`` is the plain hash
with a known bump; handlers compare it against a supplied account with
``assert_pda`` / ``validate_pdas``. ``find_program_address`` performs the
bump search used when an address is created for the first time.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .account import AccountInfo
from .errors import BuiltinError, ErrorLike, ProgramError, as_program_error
from .pubkey import Pubkey

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEEDS = 16
MAX_SEED_LEN = 32

Seed = bytes | bytearray | memoryview | Pubkey


def _seed_bytes(seeds: Sequence[Seed], extra: int = 0) -> list[bytes]:
    if len(seeds) + extra > MAX_SEEDS:
        raise ProgramError(BuiltinError.MAX_SEED_LENGTH_EXCEEDED, f"more than {MAX_SEEDS} seeds")
    raw = [bytes(seed) for seed in seeds]
    for seed in raw:
        if len(seed) > MAX_SEED_LEN:
            raise ProgramError(
                BuiltinError.MAX_SEED_LENGTH_EXCEEDED, f"seed longer than {MAX_SEED_LEN} bytes"
            )
    return raw


def _hash(seeds: Iterable[bytes], program_id: Pubkey) -> Pubkey:
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(bytes(program_id))
    hasher.update(PDA_MARKER)
    return Pubkey(hasher.digest())


def derive_address(seeds: Sequence[Seed], bump: int, program_id: Pubkey) -> Pubkey:
    """Derive the address for ``seeds`` and an already-known ``bump``. No search."""
    if not 0 <= bump <= 255:
        raise ProgramError(BuiltinError.INVALID_SEEDS, f"bump {bump} is not a byte")
    raw = _seed_bytes(seeds, extra=1)
    return _hash([*raw, bytes([bump])], program_id)


def create_program_address(seeds: Sequence[Seed], program_id: Pubkey) -> Pubkey:
    """
    Hash ``seeds`` (bump included) and reject results that lie on the curve.

    Raises:
        ProgramError: INVALID_SEEDS if the address is a valid curve point
    """
    address = _hash(_seed_bytes(seeds), program_id)
    if address.is_on_curve():
        raise ProgramError(BuiltinError.INVALID_SEEDS, "derived address is on the curve")
    return address


def find_program_address(seeds: Sequence[Seed], program_id: Pubkey) -> tuple[Pubkey, int]:
    """Search bumps from 255 down for the first off-curve address."""
    raw = _seed_bytes(seeds, extra=1)
    return Pubkey.find_program_address(raw, program_id)


def assert_pda(
    account: AccountInfo,
    seeds: Sequence[Seed],
    bump: int,
    program_id: Pubkey,
    error: ErrorLike,
) -> None:
    """Raise ``error`` unless ``account`` sits at the address derived from the seeds."""
    if account.key != derive_address(seeds, bump, program_id):
        raise as_program_error(error)


@dataclass(frozen=True)
class PdaCheck:
    """One entry of a batch PDA validation."""

    account: AccountInfo
    seeds: Sequence[Seed]
    bump: int
    error: ErrorLike


def validate_pdas(program_id: Pubkey, checks: Iterable[PdaCheck]) -> None:
    """Run ``assert_pda`` for each check in order, stopping at the first mismatch."""
    for check in checks:
        assert_pda(check.account, check.seeds, check.bump, program_id, check.error)
