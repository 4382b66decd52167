"""Shared pytest fixtures for Jiminy tests."""

from pathlib import Path

import pytest

from jiminy.core import ir
from jiminy.runtime import AccountInfo, Pubkey

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture
def counter_root() -> Path:
    """Root of the counter example project (holds jiminy.toml)."""
    return EXAMPLES_DIR / "counter"


@pytest.fixture
def program_id() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def make_account():
    """Factory for AccountInfo with a fresh key."""

    def _make(**kwargs) -> AccountInfo:
        kwargs.setdefault("key", Pubkey.new_unique())
        return AccountInfo(**kwargs)

    return _make


@pytest.fixture
def create_instruction() -> ir.InstructionSpec:
    """A ``Create`` instruction: signer owner, uninitialized target, u64 amount."""
    return ir.InstructionSpec(
        name="Create",
        discriminator=0,
        accounts=[
            ir.AccountSlot(
                name="owner",
                capability=ir.Capability.SIGNER,
                writable=True,
                index=0,
                description="Owner",
            ),
            ir.AccountSlot(
                name="target",
                capability=ir.Capability.UNINITIALIZED,
                writable=True,
                index=1,
                description="Account to create",
            ),
        ],
        fields=[ir.DataField(name="amount", type_token="u64")],
        handler_module="sample_handlers",
    )


@pytest.fixture
def sample_program(create_instruction: ir.InstructionSpec) -> ir.ProgramSpec:
    """A small program with one instruction, one error domain and one record."""
    return ir.ProgramSpec(
        name="sample",
        program_id="29d2S7vB453rNYFdR5Ycwt7y9haRT5fwVwL9zTmBhfV2",
        instructions=[create_instruction],
        errors=[
            ir.ErrorDomainSpec(
                name="SampleError",
                variants=[
                    ir.ErrorVariant(name="InvalidDiscriminator", code=6001),
                    ir.ErrorVariant(name="Unauthorized", code=6002),
                ],
            )
        ],
        records=[
            ir.RecordSpec(
                name="Vault",
                fields=[
                    ir.RecordField(name="authority", type_token="[u8; 32]"),
                    ir.RecordField(name="balance", type_token="u64"),
                    ir.RecordField(name="bump", type_token="u8"),
                ],
            )
        ],
    )
