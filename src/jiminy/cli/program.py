"""
Program commands for Jiminy CLI.

- build: Aggregate declarations and write the generated program module
- inspect: Show instructions, error codes and records
- idl: Print or write interface metadata
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from jiminy.codegen import build_metadata, metadata_to_json, metadata_to_yaml, write_program
from jiminy.core import ir
from jiminy.core.aggregator import build_program
from jiminy.core.errors import JiminyError
from jiminy.core.manifest import ProgramManifest

from .utils import load_project

console = Console()


def _load_program(root: Path, manifest: ProgramManifest, strict: bool | None = None) -> ir.ProgramSpec:
    try:
        return build_program(root, manifest, strict=strict)
    except JiminyError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _render_metadata(program: ir.ProgramSpec, version: str, format: str) -> str:
    metadata = build_metadata(program, version=version)
    if format.lower() == "yaml":
        return metadata_to_yaml(metadata)
    return metadata_to_json(metadata)


def build_command(
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail on malformed or conflicting declarations instead of dropping them",
    ),
) -> None:
    """
    Generate the program module from its declarations.

    Examples:
        jiminy build                  # Build the project in this directory
        jiminy build -p examples/counter --strict
    """
    root, manifest = load_project(project_dir)
    program = _load_program(root, manifest, strict=True if strict else None)

    try:
        output = write_program(program, root / manifest.build.output)
    except (JiminyError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(
        f"Generated {output.relative_to(root)} "
        f"({len(program.instructions)} instructions, {len(program.errors)} error domains, "
        f"{len(program.records)} records)"
    )

    if manifest.build.metadata:
        metadata_path = root / manifest.build.metadata
        format = "yaml" if metadata_path.suffix in (".yaml", ".yml") else "json"
        try:
            metadata_path.parent.mkdir(parents=True, exist_ok=True)
            metadata_path.write_text(_render_metadata(program, manifest.version, format))
        except OSError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Interface metadata written to {metadata_path.relative_to(root)}")


def inspect_command(
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
) -> None:
    """Show instructions, account slots, error codes and records."""
    root, manifest = load_project(project_dir)
    program = _load_program(root, manifest)

    console.print(f"[bold]{program.name}[/bold] [dim]{program.program_id}[/dim]")

    if not program.instructions:
        console.print("[dim]No instructions declared.[/dim]")
    for instruction in program.instructions:
        table = Table(title=f"{instruction.discriminator}: {instruction.name}")
        table.add_column("#", style="dim")
        table.add_column("Account")
        table.add_column("Capability")
        table.add_column("Description")
        for slot in instruction.accounts:
            table.add_row(str(slot.index), slot.name, slot.capability_tag, slot.description)
        console.print(table)
        if instruction.fields:
            fields = ", ".join(f"{field.name}: {field.type_token}" for field in instruction.fields)
            console.print(f"  data: {fields}")

    for domain in program.errors:
        table = Table(title=domain.name)
        table.add_column("Code", justify="right")
        table.add_column("Variant")
        for variant in domain.with_reserved_variant().variants:
            table.add_row(str(variant.code), variant.name)
        console.print(table)

    for record in program.records:
        table = Table(title=f"struct {record.name}")
        table.add_column("Field")
        table.add_column("Type")
        for field in record.fields:
            table.add_row(field.name, field.type_token)
        console.print(table)


def idl_command(
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: stdout)",
    ),
    format: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format (json or yaml)",
    ),
) -> None:
    """
    Generate interface metadata for client generators.

    Examples:
        jiminy idl                      # Print JSON to stdout
        jiminy idl -o idl.yaml -f yaml  # Save YAML to file
    """
    if format.lower() not in ("json", "yaml"):
        typer.echo(f"Unknown format '{format}' (expected json or yaml)", err=True)
        raise typer.Exit(code=1)

    root, manifest = load_project(project_dir)
    program = _load_program(root, manifest)
    content = _render_metadata(program, manifest.version, format)

    if output:
        output.write_text(content)
        typer.echo(f"Interface metadata written to {output}")
    else:
        typer.echo(content)
