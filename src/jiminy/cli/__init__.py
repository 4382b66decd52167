"""
Jiminy CLI Package.

- program.py: build, inspect and idl commands
- utils.py: Shared utilities (version, logging, manifest loading)
"""

from __future__ import annotations

import typer

from jiminy._version import __version__

from .program import build_command, idl_command, inspect_command
from .utils import configure_logging, version_callback

app = typer.Typer(
    help="""Jiminy - declarative instructions, errors and state

Commands operate on a project directory holding jiminy.toml
(default: current directory, override with --project).
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug output (otherwise LOG_LEVEL, default WARNING)",
    ),
) -> None:
    """Jiminy CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="build")(build_command)
app.command(name="inspect")(inspect_command)
app.command(name="idl")(idl_command)


def main() -> None:
    app()


__all__ = ["__version__", "app", "main"]
