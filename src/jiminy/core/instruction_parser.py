"""
Instruction declaration parser.

Line-oriented state machine over the span extracted after
``define_instruction(``:

    discriminant: 0,
    InitializeCounter,
    accounts: {
        owner: signer => writable, desc: "Owner of the counter",
        counter: uninitialized, desc: "Counter PDA to be initialized",
    },
    data: {
        start: u64,
    },

Anything after ``process:`` is handler logic and is not read. In the
default (lenient) mode a malformed declaration is dropped and a malformed
account or field line is skipped; strict mode raises ``ParseError`` with
the offending location instead.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import NoReturn

from . import ir
from .errors import make_parse_error

logger = logging.getLogger(__name__)

DISCRIMINANT_KEYWORD = "discriminant:"
ACCOUNTS_SECTION = "accounts:"
DATA_SECTION = "data:"
PROCESS_SECTION = "process:"
DESCRIPTION_MARKER = "desc:"
WRITABLE_MARKER = "writable"
VALIDATION_ARROW = "=>"
COMMENT_PREFIXES = ("#", "//")

_STRUCTURAL_CHARS = set("()[]{}\"',; \t")
_CUSTOM_RE = re.compile(r"^custom\(\s*(?P<predicate>[A-Za-z_][\w.]*)\s*\)$")


class ParseMode(Enum):
    """Where the instruction parser currently is in a declaration."""

    PREAMBLE = "preamble"
    ACCOUNTS = "accounts"
    DATA = "data"
    DONE = "done"


def is_structural(line: str) -> bool:
    """True for lines made only of brackets, quotes and separators."""
    return all(ch in _STRUCTURAL_CHARS for ch in line)


class _Malformed(Exception):
    """Internal signal: the whole declaration is unusable."""


class InstructionParser:
    """Parse one instruction declaration span into an ``InstructionSpec``."""

    def __init__(
        self,
        file: Path | None = None,
        first_line: int = 1,
        strict: bool = False,
    ) -> None:
        self.file = file
        self.first_line = first_line
        self.strict = strict

    def parse(self, text: str) -> ir.InstructionSpec | None:
        """
        Parse declaration text.

        Returns:
            The instruction, or None when the declaration is malformed
            (lenient mode only).

        Raises:
            ParseError: In strict mode, on the first malformed line
        """
        try:
            return self._parse(text)
        except _Malformed:
            return None

    def _parse(self, text: str) -> ir.InstructionSpec:
        self._name: str | None = None
        discriminator: int | None = None
        accounts: list[ir.AccountSlot] = []
        fields: list[ir.DataField] = []
        mode = ParseMode.PREAMBLE

        for offset, raw in enumerate(text.splitlines()):
            line = raw.strip()
            lineno = self.first_line + offset
            if not line or is_structural(line) or line.startswith(COMMENT_PREFIXES):
                continue

            if line.startswith(DISCRIMINANT_KEYWORD):
                discriminator = self._parse_discriminator(line, lineno, raw)
                continue

            if line.startswith(PROCESS_SECTION):
                mode = ParseMode.DONE
                break

            if line.startswith(ACCOUNTS_SECTION) or line.startswith(DATA_SECTION):
                if self._name is None:
                    self._malformed("section declared before instruction name", lineno, raw)
                if line.startswith(ACCOUNTS_SECTION):
                    mode = ParseMode.ACCOUNTS
                else:
                    mode = ParseMode.DATA
                continue

            if mode is ParseMode.PREAMBLE:
                if self._name is None and line.endswith(","):
                    candidate = line.rstrip(",").strip()
                    if not candidate.isidentifier():
                        self._malformed(f"invalid instruction name '{candidate}'", lineno, raw)
                    self._name = candidate
                continue

            if mode is ParseMode.ACCOUNTS:
                if DESCRIPTION_MARKER not in line:
                    self._skip_line("account line without desc:", lineno, raw)
                    continue
                slot = self._parse_account_line(line, len(accounts), lineno, raw)
                if slot is None:
                    continue
                if any(existing.name == slot.name for existing in accounts):
                    self._malformed(f"duplicate account '{slot.name}'", lineno, raw)
                accounts.append(slot)
                continue

            if mode is ParseMode.DATA:
                data_field = self._parse_field_line(line, lineno, raw)
                if data_field is None:
                    continue
                if any(existing.name == data_field.name for existing in fields):
                    self._malformed(f"duplicate field '{data_field.name}'", lineno, raw)
                fields.append(data_field)

        if self._name is None:
            self._malformed("instruction has no name", self.first_line, None)
        if discriminator is None:
            self._malformed("instruction has no discriminant", self.first_line, None)

        assert self._name is not None and discriminator is not None
        logger.debug(
            "Parsed instruction %s (discriminator %d, %d accounts, %d fields)",
            self._name,
            discriminator,
            len(accounts),
            len(fields),
        )
        return ir.InstructionSpec(
            name=self._name,
            discriminator=discriminator,
            accounts=accounts,
            fields=fields,
            source=str(self.file) if self.file else None,
            line=self.first_line,
        )

    def _parse_discriminator(self, line: str, lineno: int, raw: str) -> int:
        value = line[len(DISCRIMINANT_KEYWORD) :].strip().rstrip(",").strip()
        try:
            discriminator = int(value)
        except ValueError:
            self._malformed(f"discriminant '{value}' is not an integer", lineno, raw)
        if not 0 <= discriminator <= 255:
            self._malformed(f"discriminant {discriminator} does not fit in one byte", lineno, raw)
        return discriminator

    def _parse_account_line(
        self, line: str, index: int, lineno: int, raw: str
    ) -> ir.AccountSlot | None:
        """Parse ``name: capability [=> writable], desc: "text",``."""
        parts = line.split(":", 2)
        if len(parts) != 3:
            return self._skip_line("account line must have name, capability and desc", lineno, raw)

        name = parts[0].strip()
        spec_text = parts[1].strip()
        if spec_text.endswith("desc"):
            spec_text = spec_text[: -len("desc")].rstrip().rstrip(",").strip()

        description = parts[2].strip().rstrip(",").strip()
        if len(description) < 2 or description[0] != '"' or description[-1] != '"':
            return self._skip_line("account description must be quoted", lineno, raw)
        description = description[1:-1]

        if not name.isidentifier():
            return self._skip_line(f"invalid account name '{name}'", lineno, raw)

        base, _, validations = spec_text.partition(VALIDATION_ARROW)
        base = base.strip()
        predicate = None
        custom = _CUSTOM_RE.match(base)
        if custom:
            base, predicate = ir.Capability.CUSTOM.value, custom.group("predicate")
        try:
            capability = ir.Capability(base)
        except ValueError:
            return self._skip_line(f"unknown account capability '{base}'", lineno, raw)
        if capability is ir.Capability.CUSTOM and predicate is None:
            return self._skip_line("custom capability needs a predicate name", lineno, raw)

        writable = WRITABLE_MARKER in validations
        if capability is ir.Capability.UNINITIALIZED:
            writable = True

        return ir.AccountSlot(
            name=name,
            capability=capability,
            writable=writable,
            index=index,
            description=description,
            predicate=predicate,
        )

    def _parse_field_line(self, line: str, lineno: int, raw: str) -> ir.DataField | None:
        """Parse ``name: type,`` splitting on the first colon."""
        if ":" not in line:
            return self._skip_line("data field line must be 'name: type'", lineno, raw)

        name, _, token = line.partition(":")
        name = name.strip()
        token = token.strip().rstrip(",").strip()
        if not name.isidentifier() or not token:
            return self._skip_line(f"invalid data field '{line}'", lineno, raw)
        return ir.DataField(name=name, type_token=token)

    def _skip_line(self, message: str, lineno: int, raw: str) -> None:
        if self.strict:
            raise self._error(message, lineno, raw)
        logger.warning("%s:%d: %s; line dropped", self.file or "<declaration>", lineno, message)
        return None

    def _malformed(self, message: str, lineno: int, raw: str | None) -> NoReturn:
        if self.strict:
            raise self._error(message, lineno, raw)
        logger.warning(
            "%s:%d: %s; instruction %s dropped",
            self.file or "<declaration>",
            lineno,
            message,
            self._name or "<unnamed>",
        )
        raise _Malformed(message)

    def _error(self, message: str, lineno: int, raw: str | None):
        column = 1
        if raw is not None:
            column = len(raw) - len(raw.lstrip()) + 1
        return make_parse_error(
            message,
            file=self.file,
            line=lineno,
            column=column,
            snippet=raw,
            declaration=self._name,
        )


def parse_instruction(
    text: str,
    *,
    file: Path | None = None,
    line: int = 1,
    strict: bool = False,
) -> ir.InstructionSpec | None:
    """Parse one instruction declaration span."""
    return InstructionParser(file=file, first_line=line, strict=strict).parse(text)
