"""
Declaration span extraction.

Locates a declaration start marker in raw source text and returns the
balanced-bracket span that follows it. This works purely on characters:
brackets inside strings or comments count like any other bracket.
"""

from __future__ import annotations

import ast
from collections.abc import Iterator
from dataclasses import dataclass

INSTRUCTION_MARKER = "define_instruction("
ERRORS_MARKER = "define_errors("
STATE_MARKER = "define_state("


@dataclass(frozen=True)
class DeclarationSpan:
    """
    A balanced span found after a marker.

    Attributes:
        text: Source text from the first opener to its matching closer, inclusive
        start: Offset of the opener in the scanned text
        end: Offset one past the closer
        line: 1-indexed line of the marker
    """

    text: str
    start: int
    end: int
    line: int

    @property
    def body(self) -> str:
        """Text between the outer brackets."""
        return self.text[1:-1]

    def argument(self) -> tuple[str, int]:
        """
        The call argument as the running program receives it, with its first line.

        A single string literal argument is decoded (quotes removed, escapes
        applied) so a build reads the same text ``define_*`` reads at import
        time. Any other argument falls back to the raw body.
        """
        body = self.body
        try:
            value = ast.literal_eval(body.strip().removesuffix(","))
        except (ValueError, SyntaxError, TypeError):
            return body, self.line
        if not isinstance(value, str):
            return body, self.line
        leading = body[: len(body) - len(body.lstrip())]
        return value, self.line + leading.count("\n")


def extract_span(
    text: str,
    marker: str,
    opener: str = "(",
    closer: str = ")",
    start: int = 0,
) -> DeclarationSpan | None:
    """
    Extract the balanced span following the first ``marker`` at or after ``start``.

    Depth starts at zero, goes up on ``opener`` and down on ``closer``;
    extraction stops as soon as depth is back at zero after being positive.

    Returns:
        The span, or None when the marker is missing or the brackets never
        rebalance before the end of the text.
    """
    marker_pos = text.find(marker, start)
    if marker_pos < 0:
        return None

    depth = 0
    span_start = -1
    for pos in range(marker_pos, len(text)):
        ch = text[pos]
        if ch == opener:
            if depth == 0:
                span_start = pos
            depth += 1
        elif ch == closer and depth > 0:
            depth -= 1
            if depth == 0:
                return DeclarationSpan(
                    text=text[span_start : pos + 1],
                    start=span_start,
                    end=pos + 1,
                    line=text.count("\n", 0, marker_pos) + 1,
                )
    return None


def iter_spans(
    text: str,
    marker: str,
    opener: str = "(",
    closer: str = ")",
) -> Iterator[DeclarationSpan]:
    """Yield every balanced span for ``marker``, scanning left to right."""
    pos = 0
    while True:
        span = extract_span(text, marker, opener, closer, start=pos)
        if span is None:
            return
        yield span
        pos = span.end
