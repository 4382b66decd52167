"""
Jiminy CLI Utilities.

Shared helpers used across CLI modules.
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

import typer

from jiminy._version import get_version
from jiminy.core.manifest import MANIFEST_NAME, ProgramManifest, load_manifest

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"Jiminy version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(f"  Python:        {platform.python_implementation()} {platform.python_version()}")
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """``--verbose`` wins; otherwise ``LOG_LEVEL`` (default WARNING)."""
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def load_project(project_dir: Path) -> tuple[Path, ProgramManifest]:
    """Resolve a project directory and load its manifest, exiting on failure."""
    root = project_dir.resolve()
    manifest_path = root / MANIFEST_NAME
    if not manifest_path.exists():
        typer.echo(f"No {MANIFEST_NAME} found in {root}", err=True)
        raise typer.Exit(code=1)

    try:
        manifest = load_manifest(manifest_path)
    except (OSError, ValueError) as e:
        typer.echo(f"Error loading manifest: {e}", err=True)
        raise typer.Exit(code=1)

    return root, manifest
