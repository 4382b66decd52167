"""
Instruction descriptors for Jiminy IR.

An instruction is identified on the wire by a one-byte discriminator and
declares the exact account order and payload layout it expects.

Declaration syntax:

    @define_instruction(\"\"\"
        discriminant: 1,
        Increment,
        accounts: {
            owner: signer, desc: "Owner of the counter",
            counter: program => writable, desc: "Counter PDA to increment",
            vault: custom(vault_is_open), desc: "Checked by a predicate",
        },
        data: {
            amount: u64,
        },
    \"\"\")
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Capability(StrEnum):
    """Account capability kinds checked before a handler runs."""

    SIGNER = "signer"
    PROGRAM = "program"  # Owned by this program and funded
    UNINITIALIZED = "uninitialized"  # System-owned, unfunded, about to be created
    TOKEN = "token"  # Owned by the token program and funded
    NOT_TOKEN = "not_token"  # Anything but the token program
    ANY = "any"
    CUSTOM = "custom"  # A named predicate over the account must hold


class AccountSlot(BaseModel):
    """
    One declared account position of an instruction.

    Attributes:
        name: Slot name (snake_case)
        capability: Required capability kind
        writable: Whether the account must be writable
        index: 0-based position, assigned in declaration order
        description: Human-readable description for interface metadata
        predicate: Predicate name for ``custom(name)`` slots
    """

    name: str
    capability: Capability
    writable: bool = False
    index: int = Field(ge=0)
    description: str = ""
    predicate: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def signer(self) -> bool:
        return self.capability is Capability.SIGNER

    @property
    def attrs(self) -> tuple[str, ...]:
        """Interface tags for this slot, e.g. ``("signer", "writable")``."""
        tags: list[str] = []
        if self.signer:
            tags.append("signer")
        if self.writable:
            tags.append("writable")
        return tuple(tags)

    @property
    def capability_tag(self) -> str:
        """Capability spec text, e.g. ``program => writable``."""
        base = self.capability.value
        if self.predicate:
            base = f"{base}({self.predicate})"
        if self.writable:
            return f"{base} => writable"
        return base


class DataField(BaseModel):
    """A payload field; the type token is kept verbatim."""

    name: str
    type_token: str

    model_config = ConfigDict(frozen=True)


class InstructionSpec(BaseModel):
    """
    A fully parsed instruction declaration.

    Attributes:
        name: Instruction name (PascalCase)
        discriminator: Leading payload byte selecting this instruction
        accounts: Account slots in call order
        fields: Payload fields in wire order
        handler_module: Dotted module path declaring the handler, if known
        source: Source file the declaration came from, if any
        line: Line of the declaration marker in ``source``
    """

    name: str
    discriminator: int = Field(ge=0, le=255)
    accounts: list[AccountSlot] = Field(default_factory=list)
    fields: list[DataField] = Field(default_factory=list)
    handler_module: str | None = None
    source: str | None = None
    line: int = 1

    model_config = ConfigDict(frozen=True)

    def get_account(self, name: str) -> AccountSlot | None:
        for slot in self.accounts:
            if slot.name == name:
                return slot
        return None

    def same_declaration(self, other: InstructionSpec) -> bool:
        """True when both describe the same wire contract."""
        return (
            self.name == other.name
            and self.discriminator == other.discriminator
            and self.accounts == other.accounts
            and self.fields == other.fields
        )
