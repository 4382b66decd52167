"""
Instruction handlers.

``define_instruction`` turns a handler body into an ``InstructionHandler``
bound to its parsed declaration. Executing a handler validates every
declared account slot, checks the payload length and decodes the payload
before the body sees any of it.

The metadata classes at the bottom (``AccountMeta``, ``FieldMeta``,
``ProgramInstruction``) are what generated program modules are built from.
"""

from __future__ import annotations

import functools
import importlib
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, ClassVar

from jiminy.core.instruction_parser import parse_instruction
from jiminy.core.ir import InstructionSpec
from jiminy.core.type_tokens import TypeLayout, layout_of

from .account import AccountInfo
from .errors import BuiltinError, ProgramError
from .pubkey import Pubkey
from .validation import AccountPredicate, validate_accounts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstructionContext:
    """
    What a handler body receives.

    Attributes:
        program_id: The executing program
        accounts: Declared accounts by slot name
        data: Decoded payload fields by name
        remaining: Accounts passed beyond the declared slots
    """

    program_id: Pubkey
    accounts: SimpleNamespace
    data: SimpleNamespace
    remaining: tuple[AccountInfo, ...] = ()


HandlerBody = Callable[[InstructionContext], Any]


def _field_layouts(spec: InstructionSpec) -> tuple[tuple[str, TypeLayout], ...]:
    return tuple((field.name, layout_of(field.type_token)) for field in spec.fields)


def _lookup_predicate(name: str, body: HandlerBody) -> AccountPredicate | None:
    """Find ``name`` in the handler's module, or import it when dotted."""
    if "." not in name:
        return getattr(body, "__globals__", {}).get(name)
    module, _, attr = name.rpartition(".")
    try:
        return getattr(importlib.import_module(module), attr, None)
    except ImportError:
        logger.warning("Cannot import %s for predicate %s", module, name)
        return None


class InstructionHandler:
    """A handler body bound to its instruction declaration."""

    def __init__(self, spec: InstructionSpec, body: HandlerBody) -> None:
        self.spec = spec
        self.body = body
        self.layouts = _field_layouts(spec)
        self.payload_len = sum(layout.size for _, layout in self.layouts)
        functools.update_wrapper(self, body)

    def predicates(self) -> dict[str, AccountPredicate]:
        """Predicates named by ``custom(name)`` slots that resolve to something."""
        resolved: dict[str, AccountPredicate] = {}
        for slot in self.spec.accounts:
            if slot.predicate and slot.predicate not in resolved:
                predicate = _lookup_predicate(slot.predicate, self.body)
                if predicate is not None:
                    resolved[slot.predicate] = predicate
        return resolved

    def __call__(self, ctx: InstructionContext) -> Any:
        return self.body(ctx)

    def __repr__(self) -> str:
        return f"<InstructionHandler {self.spec.name} ({self.spec.discriminator})>"

    def decode(self, payload: bytes) -> SimpleNamespace:
        """
        Decode the payload into named fields.

        Raises:
            ProgramError: INVALID_INSTRUCTION_DATA if the length is wrong
        """
        if len(payload) != self.payload_len:
            raise ProgramError(
                BuiltinError.INVALID_INSTRUCTION_DATA,
                f"{self.spec.name} expects {self.payload_len} payload bytes, got {len(payload)}",
            )
        values: dict[str, Any] = {}
        offset = 0
        for name, layout in self.layouts:
            values[name] = layout.decode(payload[offset : offset + layout.size])
            offset += layout.size
        return SimpleNamespace(**values)

    def execute(
        self,
        program_id: Pubkey,
        accounts: Sequence[AccountInfo],
        payload: bytes,
    ) -> Any:
        """Validate, decode and run the body."""
        slots = self.spec.accounts
        validate_accounts(accounts, slots, program_id, self.predicates())
        data = self.decode(payload)

        ctx = InstructionContext(
            program_id=program_id,
            accounts=SimpleNamespace(**{slot.name: accounts[slot.index] for slot in slots}),
            data=data,
            remaining=tuple(accounts[len(slots) :]),
        )
        logger.debug("Executing %s with %d accounts", self.spec.name, len(accounts))
        return self.body(ctx)


def define_instruction(declaration: str) -> Callable[[HandlerBody], InstructionHandler]:
    """
    Decorator binding a handler body to an instruction declaration.

    Raises:
        ParseError: If the declaration is malformed
        UnknownTypeError: If a payload field has no fixed-size layout
    """
    spec = parse_instruction(declaration, strict=True)
    assert spec is not None

    def decorator(body: HandlerBody) -> InstructionHandler:
        return InstructionHandler(spec.model_copy(update={"handler_module": body.__module__}), body)

    return decorator


def resolve_handler(module: str, name: str) -> InstructionHandler:
    """
    Import ``module`` and return the handler declared for instruction ``name``.

    Raises:
        ImportError: If the module declares no such handler
    """
    namespace = importlib.import_module(module)
    for value in vars(namespace).values():
        if isinstance(value, InstructionHandler) and value.spec.name == name:
            return value
    raise ImportError(f"{module} declares no handler for instruction '{name}'")


# =============================================================================
# Generated-module metadata
# =============================================================================


@dataclass(frozen=True)
class AccountMeta:
    """Interface metadata for one account slot."""

    name: str
    capability: str
    writable: bool = False
    signer: bool = False
    description: str = ""


@dataclass(frozen=True)
class FieldMeta:
    """Interface metadata for one payload field."""

    name: str
    type_token: str


class ProgramInstruction:
    """
    Base for generated instruction variants.

    Each subclass describes one instruction: its discriminator, its account
    slots in call order and its payload fields in wire order.
    """

    NAME: ClassVar[str] = ""
    DISCRIMINATOR: ClassVar[int] = 0
    ACCOUNTS: ClassVar[tuple[AccountMeta, ...]] = ()
    FIELDS: ClassVar[tuple[FieldMeta, ...]] = ()

    @classmethod
    def payload_size(cls) -> int:
        return sum(layout_of(field.type_token).size for field in cls.FIELDS)

    @classmethod
    def pack(cls, **values: Any) -> bytes:
        """
        Build instruction data: the discriminator byte followed by the
        encoded payload fields.
        """
        missing = [field.name for field in cls.FIELDS if field.name not in values]
        if missing:
            raise KeyError(f"{cls.NAME or cls.__name__} is missing field(s) {missing}")
        unknown = set(values) - {field.name for field in cls.FIELDS}
        if unknown:
            raise KeyError(f"{cls.NAME or cls.__name__} has no field(s) {sorted(unknown)}")

        parts = [bytes([cls.DISCRIMINATOR])]
        for field in cls.FIELDS:
            parts.append(layout_of(field.type_token).encode(values[field.name]))
        return b"".join(parts)
