"""
Program module generator.

Turns a ``ProgramSpec`` into the source of a Python module holding:

1. the program identity,
2. one ``ErrorDomain`` class per error table,
3. the ``ProgramInstructions`` namespace with one ``ProgramInstruction``
   variant per instruction, ordered by discriminator,
4. one ``RecordLayout`` class per state record,
5. ``process_instruction``, the dispatch routine.

Generation is a pure function of the ProgramSpec: equal inputs always produce
byte-identical output.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from jiminy.core.errors import GeneratorError
from jiminy.core.ir import ErrorDomainSpec, InstructionSpec, ProgramSpec, RecordSpec
from jiminy.core.type_tokens import is_known_token

logger = logging.getLogger(__name__)

HEADER_START = "# === AUTO-GENERATED BY JIMINY ============================================="
HEADER_END = "# =========================================================================="

INSTRUCTIONS_NAMESPACE = "ProgramInstructions"

RUNTIME_IMPORTS = (
    "AccountInfo",
    "AccountMeta",
    "BuiltinError",
    "ErrorDomain",
    "FieldMeta",
    "ProgramError",
    "ProgramInstruction",
    "Pubkey",
    "RecordLayout",
    "resolve_handler",
)

RESERVED_NAMES = frozenset(
    {
        *RUNTIME_IMPORTS,
        INSTRUCTIONS_NAMESPACE,
        "PROGRAM_ID",
        "PROGRAM_INSTRUCTIONS",
        "MappingProxyType",
        "Sequence",
        "annotations",
        "process_instruction",
    }
)


def _literal(value: str | None) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(value)


class ProgramGenerator:
    """
    Generate a program module from a ``ProgramSpec``.

    Each ``_generate_*`` method returns one section of the module; sections
    are joined with two blank lines.
    """

    def generate(self, program: ProgramSpec) -> str:
        """
        Generate complete module source.

        Raises:
            GeneratorError: If two generated classes would share a name, or an
                instruction has no handler module to dispatch to
        """
        self._check_program(program)
        domains = [domain.with_reserved_variant() for domain in program.errors]

        sections = [self._generate_header(program), self._generate_imports(program)]
        sections.extend(self._generate_error_domain(domain) for domain in domains)
        if program.instructions:
            sections.append(self._generate_instructions(program.instructions))
            sections.append(self._generate_instruction_table(program.instructions))
        sections.extend(self._generate_record(record) for record in program.records)
        if program.instructions:
            sections.append(self._generate_handler_table(program.instructions))
            sections.append(self._generate_dispatch(domains[0] if domains else None))
        else:
            sections.append(self._generate_fallback_dispatch())

        return "\n\n\n".join(section.rstrip("\n") for section in sections) + "\n"

    def _check_program(self, program: ProgramSpec) -> None:
        seen: dict[str, str] = {}
        declared = [("error domain", domain.name) for domain in program.errors]
        declared += [("record", record.name) for record in program.records]
        for kind, name in declared:
            if name in RESERVED_NAMES:
                raise GeneratorError(f"{kind} name '{name}' is reserved in generated code")
            if name in seen:
                raise GeneratorError(f"{kind} '{name}' clashes with {seen[name]} '{name}'")
            seen[name] = kind

        for instruction in program.instructions:
            if not instruction.handler_module:
                raise GeneratorError(
                    f"instruction '{instruction.name}' ({instruction.discriminator}) "
                    "has no handler module"
                )
            for field in instruction.fields:
                if not is_known_token(field.type_token):
                    raise GeneratorError(
                        f"instruction '{instruction.name}' field '{field.name}' "
                        f"has unknown type '{field.type_token}'"
                    )

        for record in program.records:
            for field in record.fields:
                if not is_known_token(field.type_token):
                    raise GeneratorError(
                        f"record '{record.name}' field '{field.name}' "
                        f"has unknown type '{field.type_token}'"
                    )

    def _generate_header(self, program: ProgramSpec) -> str:
        lines = [
            HEADER_START,
            f"# Program: {program.name}",
            f"# Instructions: {len(program.instructions)}",
            f"# Error domains: {len(program.errors)}",
            f"# Records: {len(program.records)}",
            "# Do not edit: regenerate with `jiminy build`.",
            HEADER_END,
            f'"""Dispatch and interface metadata for the {program.name} program."""',
        ]
        return "\n".join(lines)

    def _generate_imports(self, program: ProgramSpec) -> str:
        lines = ["from __future__ import annotations", ""]
        lines.append("from collections.abc import Sequence")
        if program.instructions:
            lines.append("from types import MappingProxyType")
        lines.append("")
        lines.append("from jiminy.runtime import (")
        lines += [f"    {name}," for name in RUNTIME_IMPORTS]
        lines += [")", "", f'PROGRAM_ID = Pubkey.from_string("{program.program_id}")']
        return "\n".join(lines)

    def _generate_error_domain(self, domain: ErrorDomainSpec) -> str:
        lines = [f"class {domain.name}(ErrorDomain):"]
        lines += [f"    {variant.name} = {variant.code}" for variant in domain.variants]
        return "\n".join(lines)

    def _generate_instructions(self, instructions: list[InstructionSpec]) -> str:
        lines = [
            f"class {INSTRUCTIONS_NAMESPACE}:",
            '    """Instruction variants, by ascending discriminator."""',
        ]
        for instruction in instructions:
            lines.append("")
            lines += [f"    {line}" if line else "" for line in self._generate_variant(instruction)]
        return "\n".join(lines)

    def _generate_variant(self, instruction: InstructionSpec) -> list[str]:
        lines = [
            f"class {instruction.name}(ProgramInstruction):",
            f"    NAME = {_literal(instruction.name)}",
            f"    DISCRIMINATOR = {instruction.discriminator}",
        ]
        if instruction.accounts:
            lines.append("    ACCOUNTS = (")
            for slot in instruction.accounts:
                lines.append(
                    f"        AccountMeta({_literal(slot.name)}, {_literal(slot.capability.value)}, "
                    f"writable={slot.writable}, signer={slot.signer}, "
                    f"description={_literal(slot.description)}),"
                )
            lines.append("    )")
        if instruction.fields:
            lines.append("    FIELDS = (")
            for field in instruction.fields:
                lines.append(f"        FieldMeta({_literal(field.name)}, {_literal(field.type_token)}),")
            lines.append("    )")
        return lines

    def _generate_instruction_table(self, instructions: list[InstructionSpec]) -> str:
        lines = ["PROGRAM_INSTRUCTIONS = MappingProxyType("]
        lines.append("    {")
        for instruction in instructions:
            lines.append(
                f"        {instruction.discriminator}: {INSTRUCTIONS_NAMESPACE}.{instruction.name},"
            )
        lines += ["    }", ")"]
        return "\n".join(lines)

    def _generate_record(self, record: RecordSpec) -> str:
        lines = [f"class {record.name}(RecordLayout):", "    FIELDS = ("]
        lines += [f"        ({_literal(field.name)}, {_literal(field.type_token)})," for field in record.fields]
        lines.append("    )")
        return "\n".join(lines)

    def _generate_handler_table(self, instructions: list[InstructionSpec]) -> str:
        lines = ["_HANDLERS = MappingProxyType(", "    {"]
        for instruction in instructions:
            lines.append(
                f"        {instruction.discriminator}: resolve_handler("
                f"{_literal(instruction.handler_module)}, {_literal(instruction.name)}),"
            )
        lines += ["    }", ")"]
        return "\n".join(lines)

    def _generate_dispatch(self, domain: ErrorDomainSpec | None) -> str:
        if domain is not None:
            reserved = domain.unknown_discriminator
            assert reserved is not None
            unknown = f"{domain.name}.{reserved.name}.into()"
        else:
            unknown = "ProgramError(BuiltinError.INVALID_INSTRUCTION_DATA)"

        return "\n".join(
            [
                "def process_instruction(",
                "    program_id: Pubkey,",
                "    accounts: Sequence[AccountInfo],",
                "    instruction_data: bytes,",
                ") -> None:",
                "    if program_id != PROGRAM_ID:",
                "        raise ProgramError(BuiltinError.INCORRECT_PROGRAM_ID)",
                "    if not instruction_data:",
                f"        raise {unknown}",
                "    handler = _HANDLERS.get(instruction_data[0])",
                "    if handler is None:",
                f"        raise {unknown}",
                "    handler.execute(program_id, accounts, bytes(instruction_data[1:]))",
            ]
        )

    def _generate_fallback_dispatch(self) -> str:
        return "\n".join(
            [
                "def process_instruction(",
                "    program_id: Pubkey,",
                "    accounts: Sequence[AccountInfo],",
                "    instruction_data: bytes,",
                ") -> None:",
                "    raise ProgramError(BuiltinError.INVALID_INSTRUCTION_DATA)",
            ]
        )


def generate_program(program: ProgramSpec) -> str:
    return ProgramGenerator().generate(program)


def write_program(program: ProgramSpec, path: Path) -> Path:
    """
    Generate and write the program module.

    Args:
        program: Aggregated program declarations
        path: Output file

    Returns:
        The written path
    """
    content = generate_program(program)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    logger.info(
        "Wrote %s (%d instructions, %d records)",
        path,
        len(program.instructions),
        len(program.records),
    )
    return path