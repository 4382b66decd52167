"""
Zero-copy state access.

``RecordLayout`` subclasses describe a packed, fixed-size record. ``load``
and ``load_mut`` open a borrow on an account and yield a ``RecordView``
reading and writing fields directly in the account's storage. The view is
released when the ``with`` block exits; using it afterwards raises.

Usage:

    STATE = define_state(\"\"\"
        struct Counter {
            owner: [u8; 32],
            count: u64,
            bump: u8,
        }
    \"\"\")
    Counter = STATE["Counter"]

    with load_mut(counter_account, Counter) as counter:
        counter.count += 1
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, ClassVar

from jiminy.core.ir import RecordSpec
from jiminy.core.record_parser import parse_records
from jiminy.core.type_tokens import TypeLayout, layout_of

from .account import AccountInfo
from .errors import BuiltinError, ProgramError


class RecordLayout:
    """
    Base class for fixed-layout records.

    Subclasses set ``FIELDS`` to ``(name, type_token)`` pairs; offsets and
    ``LEN`` are computed when the subclass is created.
    """

    FIELDS: ClassVar[tuple[tuple[str, str], ...]] = ()
    LEN: ClassVar[int] = 0
    OFFSETS: ClassVar[Mapping[str, tuple[int, TypeLayout]]] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        offsets: dict[str, tuple[int, TypeLayout]] = {}
        offset = 0
        for name, token in cls.FIELDS:
            if name in offsets:
                raise TypeError(f"{cls.__name__}: duplicate field '{name}'")
            layout = layout_of(token)
            offsets[name] = (offset, layout)
            offset += layout.size
        cls.OFFSETS = MappingProxyType(offsets)
        cls.LEN = offset

    def __init__(self) -> None:
        raise TypeError("RecordLayout subclasses describe storage; use load() or load_mut()")

    @classmethod
    def from_spec(cls, spec: RecordSpec, module: str | None = None) -> type[RecordLayout]:
        namespace: dict[str, Any] = {
            "FIELDS": tuple((f.name, f.type_token) for f in spec.fields),
        }
        if module:
            namespace["__module__"] = module
        return type(spec.name, (cls,), namespace)

    @classmethod
    def pack(cls, **values: Any) -> bytearray:
        """Encode a full record; omitted fields are zeroed."""
        unknown = set(values) - set(cls.OFFSETS)
        if unknown:
            raise KeyError(f"{cls.__name__} has no field(s) {sorted(unknown)}")
        buffer = bytearray(cls.LEN)
        for name, (offset, layout) in cls.OFFSETS.items():
            if name in values:
                buffer[offset : offset + layout.size] = layout.encode(values[name])
        return buffer


class RecordView:
    """Field access over borrowed account storage."""

    __slots__ = ("_layout", "_buffer", "_writable")

    def __init__(self, layout: type[RecordLayout], buffer: memoryview, writable: bool) -> None:
        object.__setattr__(self, "_layout", layout)
        object.__setattr__(self, "_buffer", buffer)
        object.__setattr__(self, "_writable", writable)

    def _field(self, name: str) -> tuple[int, TypeLayout]:
        try:
            return self._layout.OFFSETS[name]
        except KeyError:
            raise AttributeError(f"{self._layout.__name__} has no field '{name}'") from None

    def __getattr__(self, name: str) -> Any:
        offset, layout = self._field(name)
        return layout.decode(self._buffer[offset : offset + layout.size])

    def __setattr__(self, name: str, value: Any) -> None:
        offset, layout = self._field(name)
        if not self._writable:
            raise AttributeError(f"{self._layout.__name__} was loaded read-only")
        self._buffer[offset : offset + layout.size] = layout.encode(value)

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self._layout.OFFSETS}

    def __repr__(self) -> str:
        return f"<{self._layout.__name__} view>"


def _check_size(account: AccountInfo, layout: type[RecordLayout], size: int) -> None:
    if size != layout.LEN:
        raise ProgramError(
            BuiltinError.INVALID_ACCOUNT_DATA,
            f"account {account.key} holds {size} bytes, {layout.__name__} needs {layout.LEN}",
        )


@contextmanager
def load(account: AccountInfo, layout: type[RecordLayout]) -> Iterator[RecordView]:
    """Read-only view of ``account`` as ``layout``."""
    with account.borrow_data() as data:
        _check_size(account, layout, len(data))
        yield RecordView(layout, data, writable=False)


@contextmanager
def load_mut(account: AccountInfo, layout: type[RecordLayout]) -> Iterator[RecordView]:
    """Writable view of ``account`` as ``layout``."""
    with account.borrow_mut_data() as data:
        _check_size(account, layout, len(data))
        yield RecordView(layout, data, writable=True)


def define_state(declaration: str, module: str | None = None) -> dict[str, type[RecordLayout]]:
    """
    Build record layouts from a ``struct`` declaration body.

    Raises:
        ParseError: If a block is malformed
        UnknownTypeError: If a field type has no fixed-size layout
    """
    return {
        spec.name: RecordLayout.from_spec(spec, module)
        for spec in parse_records(declaration, strict=True)
    }
