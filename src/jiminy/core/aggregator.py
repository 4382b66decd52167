"""
Descriptor aggregation.

Walks a program's source tree, extracts every declaration span, parses it
and merges the results into one ``ProgramSpec``:

1. Discover instruction, error and state files from the manifest
2. Parse each declaration span (malformed ones dropped unless strict)
3. Collapse identical duplicates, reject or skip conflicting ones
4. Order instructions by ascending discriminator
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from . import ir
from .error_parser import parse_error_table
from .errors import make_link_error
from .extractor import ERRORS_MARKER, INSTRUCTION_MARKER, STATE_MARKER, iter_spans
from .instruction_parser import parse_instruction
from .manifest import ProgramManifest
from .record_parser import parse_records
from .type_tokens import is_known_token

logger = logging.getLogger(__name__)


@dataclass
class SourceSet:
    """Files holding each kind of declaration."""

    instructions: list[Path] = field(default_factory=list)
    errors: list[Path] = field(default_factory=list)
    state: list[Path] = field(default_factory=list)


def discover_sources(root: Path, manifest: ProgramManifest) -> SourceSet:
    sources = SourceSet()

    instruction_dir = (root / manifest.sources.instructions).resolve()
    if instruction_dir.is_dir():
        sources.instructions = sorted(
            p for p in instruction_dir.glob("*.py") if p.name != "__init__.py"
        )
    else:
        logger.warning("Instruction directory not found: %s", instruction_dir)

    for rel in manifest.sources.errors:
        path = (root / rel).resolve()
        if path.is_file():
            sources.errors.append(path)
        else:
            logger.debug("Error file not found: %s", path)

    if manifest.sources.state:
        state_path = (root / manifest.sources.state).resolve()
        if state_path.is_dir():
            sources.state = sorted(state_path.rglob("*.py"))
        elif state_path.with_suffix(".py").is_file():
            sources.state = [state_path.with_suffix(".py")]
        elif state_path.is_file():
            sources.state = [state_path]

    return sources


def module_path_for(file: Path, root: Path, package: str) -> str | None:
    """Dotted import path of ``file`` inside ``package``, or None if outside it."""
    package_dir = (root / package.replace(".", "/")).resolve()
    try:
        rel = file.resolve().relative_to(package_dir).with_suffix("")
    except ValueError:
        return None
    parts = [p for p in rel.parts if p != "__init__"]
    return ".".join([package, *parts])


def collect_instructions(
    files: Iterable[Path],
    *,
    root: Path | None = None,
    package: str | None = None,
    strict: bool = False,
) -> list[ir.InstructionSpec]:
    """Parse every instruction declaration in ``files``, in file order."""
    instructions: list[ir.InstructionSpec] = []
    for file in files:
        text = file.read_text(encoding="utf-8")
        handler_module = None
        if root is not None and package:
            handler_module = module_path_for(file, root, package)

        found = False
        for span in iter_spans(text, INSTRUCTION_MARKER):
            found = True
            body, line = span.argument()
            spec = parse_instruction(body, file=file, line=line, strict=strict)
            if spec is None:
                continue
            if handler_module:
                spec = spec.model_copy(update={"handler_module": handler_module})
            instructions.append(spec)

        if not found:
            logger.debug("No instruction declaration in %s", file)
    return instructions


def collect_errors(files: Iterable[Path], *, strict: bool = False) -> list[ir.ErrorDomainSpec]:
    domains: list[ir.ErrorDomainSpec] = []
    for file in files:
        text = file.read_text(encoding="utf-8")
        for span in iter_spans(text, ERRORS_MARKER):
            body, line = span.argument()
            domain = parse_error_table(body, file=file, line=line, strict=strict)
            if domain is not None:
                domains.append(domain)
    return domains


def collect_records(files: Iterable[Path], *, strict: bool = False) -> list[ir.RecordSpec]:
    """Every record in every file, flattened into one list."""
    records: list[ir.RecordSpec] = []
    for file in files:
        text = file.read_text(encoding="utf-8")
        for span in iter_spans(text, STATE_MARKER):
            body, line = span.argument()
            records.extend(parse_records(body, file=file, line=line, strict=strict))
    return records


def merge_instructions(
    instructions: Iterable[ir.InstructionSpec], *, strict: bool = False
) -> list[ir.InstructionSpec]:
    """
    Deduplicate and order instructions by discriminator.

    Identical redeclarations collapse silently. A conflicting redeclaration
    (same discriminator or same name, different contract) keeps the first
    one, or raises LinkError in strict mode.
    """
    by_discriminator: dict[int, ir.InstructionSpec] = {}
    by_name: dict[str, ir.InstructionSpec] = {}

    for spec in instructions:
        existing = by_discriminator.get(spec.discriminator) or by_name.get(spec.name)
        if existing is None:
            by_discriminator[spec.discriminator] = spec
            by_name[spec.name] = spec
            continue

        if existing.same_declaration(spec):
            logger.debug("Collapsed duplicate declaration of %s", spec.name)
            continue

        message = (
            f"Instruction {spec.name} (discriminator {spec.discriminator}) conflicts with "
            f"{existing.name} (discriminator {existing.discriminator}) from {existing.source}"
        )
        if strict:
            raise make_link_error(
                message,
                file=Path(spec.source) if spec.source else None,
                line=spec.line,
                declaration=spec.name,
            )
        logger.warning("%s; keeping the first declaration", message)

    return sorted(by_discriminator.values(), key=lambda i: i.discriminator)


def merge_error_domains(
    domains: Iterable[ir.ErrorDomainSpec], *, strict: bool = False
) -> list[ir.ErrorDomainSpec]:
    merged: dict[str, ir.ErrorDomainSpec] = {}
    for domain in domains:
        existing = merged.get(domain.name)
        if existing is None:
            merged[domain.name] = domain
        elif existing.variants != domain.variants:
            message = f"Error domain {domain.name} is declared twice with different variants"
            if strict:
                raise make_link_error(message, declaration=domain.name)
            logger.warning("%s; keeping the first declaration", message)
    return list(merged.values())


def merge_records(records: Iterable[ir.RecordSpec], *, strict: bool = False) -> list[ir.RecordSpec]:
    merged: dict[str, ir.RecordSpec] = {}
    for record in records:
        existing = merged.get(record.name)
        if existing is None:
            merged[record.name] = record
        elif existing.fields != record.fields:
            message = (
                f"Record {record.name} in {record.source} conflicts with the one in "
                f"{existing.source}"
            )
            if strict:
                raise make_link_error(message, declaration=record.name)
            logger.warning("%s; keeping the first declaration", message)
    return list(merged.values())


def check_type_tokens(program: ir.ProgramSpec, *, strict: bool = False) -> list[str]:
    """Report fields whose type token has no known layout."""
    problems: list[str] = []
    for instruction in program.instructions:
        for data_field in instruction.fields:
            if not is_known_token(data_field.type_token):
                problems.append(
                    f"{instruction.name}.{data_field.name}: unknown type '{data_field.type_token}'"
                )
    for record in program.records:
        for record_field in record.fields:
            if not is_known_token(record_field.type_token):
                problems.append(
                    f"{record.name}.{record_field.name}: unknown type '{record_field.type_token}'"
                )

    for problem in problems:
        if strict:
            raise make_link_error(problem)
        logger.warning(problem)
    return problems


def build_program(
    root: Path,
    manifest: ProgramManifest,
    *,
    strict: bool | None = None,
) -> ir.ProgramSpec:
    """
    Aggregate every declaration of a program into a ProgramSpec.

    Args:
        root: Project root (directory holding jiminy.toml)
        manifest: Loaded manifest
        strict: Override the manifest's strict setting

    Raises:
        ParseError: Malformed declaration (strict mode)
        LinkError: Conflicting declarations or unknown types (strict mode)
    """
    if strict is None:
        strict = manifest.strict

    sources = discover_sources(root, manifest)
    logger.info(
        "Scanning %d instruction, %d error and %d state file(s)",
        len(sources.instructions),
        len(sources.errors),
        len(sources.state),
    )

    instructions = merge_instructions(
        collect_instructions(
            sources.instructions, root=root, package=manifest.package, strict=strict
        ),
        strict=strict,
    )
    errors = merge_error_domains(collect_errors(sources.errors, strict=strict), strict=strict)
    records = merge_records(collect_records(sources.state, strict=strict), strict=strict)

    program = ir.ProgramSpec(
        name=manifest.name,
        program_id=manifest.program_id,
        instructions=instructions,
        errors=errors,
        records=records,
    )
    check_type_tokens(program, strict=strict)
    return program
