"""Tests for program-derived addresses."""

import hashlib

import pytest

from jiminy.runtime import (
    BuiltinError,
    PdaCheck,
    ProgramError,
    Pubkey,
    assert_pda,
    create_program_address,
    derive_address,
    find_program_address,
    validate_pdas,
)
from jiminy.runtime.errors import ErrorDomain
from jiminy.runtime.pda import PDA_MARKER


class VaultError(ErrorDomain):
    InvalidDiscriminator = 6001
    VaultKeyIncorrect = 6010


class TestDerivation:
    def test_find_returns_off_curve_address(self, program_id: Pubkey) -> None:
        address, bump = find_program_address([b"vault"], program_id)

        assert 0 <= bump <= 255
        assert not address.is_on_curve()
        assert derive_address([b"vault"], bump, program_id) == address

    def test_hash_layout(self, program_id: Pubkey) -> None:
        expected = hashlib.sha256(b"seed" + b"\x07" + bytes(program_id) + PDA_MARKER).digest()

        assert bytes(derive_address([b"seed"], 7, program_id)) == expected

    def test_pubkey_seeds(self, program_id: Pubkey) -> None:
        owner = Pubkey.new_unique()

        assert find_program_address([b"counter", owner], program_id) == find_program_address(
            [b"counter", bytes(owner)], program_id
        )

    def test_different_programs_different_addresses(self) -> None:
        first, _ = find_program_address([b"vault"], Pubkey.new_unique())
        second, _ = find_program_address([b"vault"], Pubkey.new_unique())

        assert first != second

    def test_addresses_render_as_base58(self) -> None:
        address = Pubkey(bytes(32))

        assert str(address) == "1" * 32
        assert Pubkey.from_string(str(address)) == address

    def test_create_rejects_on_curve(self, program_id: Pubkey) -> None:
        rejected = []
        for bump in range(256):
            try:
                create_program_address([b"x", bytes([bump])], program_id)
            except ProgramError as e:
                assert e.error is BuiltinError.INVALID_SEEDS
                rejected.append(bump)

        # roughly half of all hashes are curve points
        assert rejected
        for bump in rejected:
            assert derive_address([b"x"], bump, program_id).is_on_curve()

    def test_find_agrees_with_create(self, program_id: Pubkey) -> None:
        address, bump = find_program_address([b"x"], program_id)

        assert create_program_address([b"x", bytes([bump])], program_id) == address
        for higher in range(bump + 1, 256):
            with pytest.raises(ProgramError):
                create_program_address([b"x", bytes([higher])], program_id)

    @pytest.mark.parametrize(
        "seeds",
        [[b"s"] * 16, [b"x" * 33]],
    )
    def test_seed_limits(self, program_id: Pubkey, seeds: list[bytes]) -> None:
        with pytest.raises(ProgramError) as exc_info:
            derive_address(seeds, 255, program_id)

        assert exc_info.value.error is BuiltinError.MAX_SEED_LENGTH_EXCEEDED

    def test_bump_must_be_a_byte(self, program_id: Pubkey) -> None:
        with pytest.raises(ProgramError) as exc_info:
            derive_address([b"x"], 256, program_id)

        assert exc_info.value.error is BuiltinError.INVALID_SEEDS


class TestAssertPda:
    def test_matching_account_passes(self, make_account, program_id: Pubkey) -> None:
        address, bump = find_program_address([b"vault"], program_id)

        assert_pda(make_account(key=address), [b"vault"], bump, program_id, VaultError.VaultKeyIncorrect)

    def test_mismatch_raises_given_error(self, make_account, program_id: Pubkey) -> None:
        _, bump = find_program_address([b"vault"], program_id)

        with pytest.raises(ProgramError) as exc_info:
            assert_pda(make_account(), [b"vault"], bump, program_id, VaultError.VaultKeyIncorrect)

        assert exc_info.value.custom_code == 6010

    def test_builtin_error(self, make_account, program_id: Pubkey) -> None:
        with pytest.raises(ProgramError) as exc_info:
            assert_pda(make_account(), [b"vault"], 1, program_id, BuiltinError.INVALID_SEEDS)

        assert exc_info.value.error is BuiltinError.INVALID_SEEDS

    def test_validate_pdas_stops_at_first_mismatch(self, make_account, program_id: Pubkey) -> None:
        good_key, good_bump = find_program_address([b"a"], program_id)
        checks = [
            PdaCheck(make_account(key=good_key), [b"a"], good_bump, VaultError.VaultKeyIncorrect),
            PdaCheck(make_account(), [b"b"], 0, VaultError.InvalidDiscriminator),
            PdaCheck(make_account(), [b"c"], 0, BuiltinError.INVALID_SEEDS),
        ]

        with pytest.raises(ProgramError) as exc_info:
            validate_pdas(program_id, checks)

        assert exc_info.value.custom_code == 6001
