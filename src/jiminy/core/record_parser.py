"""
State record parser.

A ``define_state(`` body may hold several blocks:

    struct Platform {
        authority: [u8; 32],
        fee: [u8; 2],
    }

    struct Position {
        amount: [u8; 8],
        side: u8,
    }
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from . import ir
from .errors import make_parse_error
from .extractor import extract_span
from .instruction_parser import COMMENT_PREFIXES, is_structural

logger = logging.getLogger(__name__)

_STRUCT_RE = re.compile(r"(?:\bpub\s+)?\bstruct\s+(?P<name>[A-Za-z_]\w*)\s*\{")
_FIELD_RE = re.compile(r"^(?:pub\s+)?(?P<name>[A-Za-z_]\w*)\s*:\s*(?P<type>.+?)\s*,?$")


def parse_records(
    text: str,
    *,
    file: Path | None = None,
    line: int = 1,
    strict: bool = False,
) -> list[ir.RecordSpec]:
    """
    Parse every ``struct Name { ... }`` block in a declaration body.

    Malformed blocks are dropped (lenient) or raise ParseError (strict).
    """
    records: list[ir.RecordSpec] = []
    where = file or "<declaration>"

    for match in _STRUCT_RE.finditer(text):
        name = match.group("name")
        block_line = line + text.count("\n", 0, match.start())

        span = extract_span(text, "{", "{", "}", start=match.end() - 1)
        if span is None:
            if strict:
                raise make_parse_error(
                    f"struct {name} is never closed", file=file, line=block_line, declaration=name
                )
            logger.warning("%s:%d: struct %s is never closed; record dropped", where, block_line, name)
            continue

        record = _parse_block(name, span.body, file, block_line, strict)
        if record is not None:
            records.append(record)

    return records


def _parse_block(
    name: str,
    body: str,
    file: Path | None,
    block_line: int,
    strict: bool,
) -> ir.RecordSpec | None:
    fields: list[ir.RecordField] = []
    where = file or "<declaration>"

    for offset, raw in enumerate(body.splitlines()):
        stripped = raw.strip()
        lineno = block_line + offset
        if not stripped or is_structural(stripped) or stripped.startswith(COMMENT_PREFIXES):
            continue

        match = _FIELD_RE.match(stripped)
        problem = None
        if not match:
            problem = f"expected 'field: Type,' but found '{stripped}'"
        elif any(f.name == match.group("name") for f in fields):
            problem = f"duplicate field '{match.group('name')}'"

        if problem:
            if strict:
                raise make_parse_error(
                    problem, file=file, line=lineno, snippet=raw, declaration=name
                )
            logger.warning("%s:%d: %s; record %s dropped", where, lineno, problem, name)
            return None

        assert match is not None
        fields.append(ir.RecordField(name=match.group("name"), type_token=match.group("type")))

    if not fields:
        if strict:
            raise make_parse_error(
                f"struct {name} declares no fields", file=file, line=block_line, declaration=name
            )
        logger.warning("%s:%d: struct %s declares no fields; record dropped", where, block_line, name)
        return None

    return ir.RecordSpec(name=name, fields=fields, source=str(file) if file else None)
