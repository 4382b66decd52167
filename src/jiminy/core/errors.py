"""
Error types for Jiminy declaration parsing, aggregation and code generation.

Runtime failures raised while executing an instruction live in
``jiminy.runtime.errors``; everything here is a build-time problem.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class JiminyError(Exception):
    """Base exception for all Jiminy build errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(JiminyError):
    """
    Raised when a declaration cannot be parsed (strict mode only).

    Examples:
    - Instruction without a name or discriminant
    - Discriminant outside 0..255
    - Account line with an unknown capability
    - Error table with duplicate codes
    """

    pass


class LinkError(JiminyError):
    """
    Raised when declarations from several files conflict.

    Examples:
    - Two instructions sharing a discriminator
    - Two records sharing a name
    - Manifest pointing at missing source directories
    """

    pass


class GeneratorError(JiminyError):
    """
    Raised when the generated module cannot be produced.

    Examples:
    - Instruction with no handler module to bind to
    - Output directory issues
    """

    pass


class UnknownTypeError(JiminyError):
    """Raised when a type token has no known fixed-size layout."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet showing the error location
        declaration: Optional name of the declaration being parsed
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None
    declaration: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "error.py:10:5 in Increment"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.declaration:
            location += f" in {self.declaration}"

        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the offending line with its number and an error marker."""
        if not self.snippet:
            return ""

        prefix = f"{self.line:4d} | "
        marker = " " * (len(prefix) + self.column - 1) + "^^^"
        return f"{prefix}{self.snippet}\n{marker}"


def make_parse_error(
    message: str,
    file: Path | None,
    line: int,
    column: int = 1,
    snippet: str | None = None,
    declaration: str | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        file: Source file path (``<declaration>`` when parsing bare text)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source line
        declaration: Optional declaration name

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(
        file=file or Path("<declaration>"),
        line=line,
        column=column,
        snippet=snippet,
        declaration=declaration,
    )
    return ParseError(message, context)


def make_link_error(
    message: str,
    file: Path | None = None,
    line: int | None = None,
    declaration: str | None = None,
) -> LinkError:
    """
    Helper to create a LinkError with optional context.

    Args:
        message: Error description
        file: Optional source file path
        line: Optional line number
        declaration: Optional declaration name

    Returns:
        LinkError with context if location provided
    """
    if file and line:
        context = ErrorContext(file=file, line=line, column=1, declaration=declaration)
        return LinkError(message, context)
    return LinkError(message)
