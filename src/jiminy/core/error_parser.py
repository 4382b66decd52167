"""
Error table parser.

Parses the body extracted after ``define_errors(``:

    CounterProgramError,
    InvalidDiscriminator = 6001,
    Unauthorized = 6002,

The first meaningful line names the domain; every ``Identifier = integer,``
line after it is a variant. A domain with no variants is discarded.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from . import ir
from .errors import make_parse_error
from .instruction_parser import COMMENT_PREFIXES, is_structural

logger = logging.getLogger(__name__)

_VARIANT_RE = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*=\s*(?P<code>\d+)\s*,?$")


def parse_error_table(
    text: str,
    *,
    file: Path | None = None,
    line: int = 1,
    strict: bool = False,
) -> ir.ErrorDomainSpec | None:
    """
    Parse one error table declaration span.

    Returns:
        The error domain, or None when it is malformed or empty (lenient mode).

    Raises:
        ParseError: In strict mode, on the first malformed line
    """
    domain_name: str | None = None
    variants: list[ir.ErrorVariant] = []
    where = file or "<declaration>"

    def reject(message: str, lineno: int, raw: str | None) -> None:
        if strict:
            raise make_parse_error(
                message, file=file, line=lineno, snippet=raw, declaration=domain_name
            )
        logger.warning("%s:%d: %s; error table dropped", where, lineno, message)

    for offset, raw in enumerate(text.splitlines()):
        stripped = raw.strip()
        lineno = line + offset
        if not stripped or is_structural(stripped) or stripped.startswith(COMMENT_PREFIXES):
            continue

        if domain_name is None:
            candidate = stripped.rstrip(",").strip()
            if not candidate.isidentifier():
                reject(f"invalid error domain name '{candidate}'", lineno, raw)
                return None
            domain_name = candidate
            continue

        match = _VARIANT_RE.match(stripped)
        if not match:
            reject(f"expected 'Variant = code,' but found '{stripped}'", lineno, raw)
            return None

        code = int(match.group("code"))
        if code > 0xFFFF_FFFF:
            reject(f"error code {code} does not fit in u32", lineno, raw)
            return None
        variant = ir.ErrorVariant(name=match.group("name"), code=code)
        if any(v.name == variant.name for v in variants):
            reject(f"duplicate error variant '{variant.name}'", lineno, raw)
            return None
        if any(v.code == variant.code for v in variants):
            reject(f"duplicate error code {variant.code}", lineno, raw)
            return None
        variants.append(variant)

    if domain_name is None or not variants:
        reject(f"error table {domain_name or '<unnamed>'} declares no variants", line, None)
        return None

    return ir.ErrorDomainSpec(
        name=domain_name,
        variants=variants,
        source=str(file) if file else None,
    )
