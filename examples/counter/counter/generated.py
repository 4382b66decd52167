# === AUTO-GENERATED BY JIMINY =============================================
# Program: counter
# Instructions: 4
# Error domains: 1
# Records: 1
# Do not edit: regenerate with `jiminy build`.
# ==========================================================================
"""Dispatch and interface metadata for the counter program."""


from __future__ import annotations

from collections.abc import Sequence
from types import MappingProxyType

from jiminy.runtime import (
    AccountInfo,
    AccountMeta,
    BuiltinError,
    ErrorDomain,
    FieldMeta,
    ProgramError,
    ProgramInstruction,
    Pubkey,
    RecordLayout,
    resolve_handler,
)

PROGRAM_ID = Pubkey.from_string("61Zq8MumjH3d5WT5BC1NC76TW9rLd2gh4tNHHXffGGwy")


class CounterProgramError(ErrorDomain):
    InvalidDiscriminator = 6001
    Unauthorized = 6002
    CounterKeyIncorrect = 6003
    CounterAlreadyInitialized = 6004
    CounterNotInitialized = 6005
    CounterUnderflow = 6006


class ProgramInstructions:
    """Instruction variants, by ascending discriminator."""

    class InitializeCounter(ProgramInstruction):
        NAME = "InitializeCounter"
        DISCRIMINATOR = 0
        ACCOUNTS = (
            AccountMeta("owner", "signer", writable=True, signer=True, description="Owner of the counter"),
            AccountMeta("counter", "uninitialized", writable=True, signer=False, description="Counter PDA to be initialized"),
            AccountMeta("system_program", "any", writable=False, signer=False, description="System program"),
        )
        FIELDS = (
            FieldMeta("start", "u64"),
        )

    class Increment(ProgramInstruction):
        NAME = "Increment"
        DISCRIMINATOR = 1
        ACCOUNTS = (
            AccountMeta("owner", "signer", writable=False, signer=True, description="Owner of the counter"),
            AccountMeta("counter", "program", writable=True, signer=False, description="Counter PDA to increment"),
        )

    class Decrement(ProgramInstruction):
        NAME = "Decrement"
        DISCRIMINATOR = 2
        ACCOUNTS = (
            AccountMeta("owner", "signer", writable=False, signer=True, description="Owner of the counter"),
            AccountMeta("counter", "program", writable=True, signer=False, description="Counter PDA to decrement"),
        )

    class CloseCounter(ProgramInstruction):
        NAME = "CloseCounter"
        DISCRIMINATOR = 3
        ACCOUNTS = (
            AccountMeta("owner", "signer", writable=True, signer=True, description="Owner receiving the counter's balance"),
            AccountMeta("counter", "program", writable=True, signer=False, description="Counter PDA to close"),
        )


PROGRAM_INSTRUCTIONS = MappingProxyType(
    {
        0: ProgramInstructions.InitializeCounter,
        1: ProgramInstructions.Increment,
        2: ProgramInstructions.Decrement,
        3: ProgramInstructions.CloseCounter,
    }
)


class Counter(RecordLayout):
    FIELDS = (
        ("owner", "[u8; 32]"),
        ("count", "u64"),
        ("bump", "u8"),
    )


_HANDLERS = MappingProxyType(
    {
        0: resolve_handler("counter.instructions.initialize_counter", "InitializeCounter"),
        1: resolve_handler("counter.instructions.increment", "Increment"),
        2: resolve_handler("counter.instructions.decrement", "Decrement"),
        3: resolve_handler("counter.instructions.close_counter", "CloseCounter"),
    }
)


def process_instruction(
    program_id: Pubkey,
    accounts: Sequence[AccountInfo],
    instruction_data: bytes,
) -> None:
    if program_id != PROGRAM_ID:
        raise ProgramError(BuiltinError.INCORRECT_PROGRAM_ID)
    if not instruction_data:
        raise CounterProgramError.InvalidDiscriminator.into()
    handler = _HANDLERS.get(instruction_data[0])
    if handler is None:
        raise CounterProgramError.InvalidDiscriminator.into()
    handler.execute(program_id, accounts, bytes(instruction_data[1:]))
