"""
Fixed-size type tokens.

Payload and record fields are declared with type tokens such as ``u64``,
``bool``, ``Pubkey`` or ``[u8; 32]``. Values are packed with no padding
and little-endian byte order.
"""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from functools import cache
from typing import Any

from .errors import UnknownTypeError

_ARRAY_RE = re.compile(r"^\[\s*(?P<inner>.+?)\s*;\s*(?P<count>\d+)\s*\]$")

# token -> (size, kind)
PRIMITIVES: dict[str, tuple[int, str]] = {
    "u8": (1, "uint"),
    "i8": (1, "int"),
    "bool": (1, "bool"),
    "u16": (2, "uint"),
    "i16": (2, "int"),
    "u32": (4, "uint"),
    "i32": (4, "int"),
    "f32": (4, "float"),
    "u64": (8, "uint"),
    "i64": (8, "int"),
    "f64": (8, "float"),
    "u128": (16, "uint"),
    "i128": (16, "int"),
    "Pubkey": (32, "bytes"),
}

_FLOAT_FORMATS = {4: "<f", 8: "<d"}


@dataclass(frozen=True)
class TypeLayout:
    """
    Byte layout of one type token.

    Attributes:
        token: Normalised token text
        size: Encoded size in bytes
        kind: uint, int, bool, float, bytes or array
        element: Element layout for arrays
        count: Element count for arrays
    """

    token: str
    size: int
    kind: str
    element: TypeLayout | None = None
    count: int = 0

    def decode(self, buffer: bytes | memoryview) -> Any:
        """Decode exactly ``size`` bytes."""
        raw = bytes(buffer)
        if len(raw) != self.size:
            raise ValueError(f"{self.token} needs {self.size} bytes, got {len(raw)}")

        if self.kind == "uint":
            return int.from_bytes(raw, "little")
        if self.kind == "int":
            return int.from_bytes(raw, "little", signed=True)
        if self.kind == "bool":
            return raw[0] != 0
        if self.kind == "float":
            return struct.unpack(_FLOAT_FORMATS[self.size], raw)[0]
        if self.kind == "bytes":
            return raw

        assert self.element is not None
        step = self.element.size
        return tuple(self.element.decode(raw[i * step : (i + 1) * step]) for i in range(self.count))

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` into exactly ``size`` bytes."""
        if self.kind == "uint":
            return int(value).to_bytes(self.size, "little")
        if self.kind == "int":
            return int(value).to_bytes(self.size, "little", signed=True)
        if self.kind == "bool":
            return b"\x01" if value else b"\x00"
        if self.kind == "float":
            return struct.pack(_FLOAT_FORMATS[self.size], value)
        if self.kind == "bytes":
            raw = bytes(value)
        else:
            assert self.element is not None
            if len(value) != self.count:
                raise ValueError(f"{self.token} needs {self.count} elements, got {len(value)}")
            raw = b"".join(self.element.encode(item) for item in value)

        if len(raw) != self.size:
            raise ValueError(f"{self.token} needs {self.size} bytes, got {len(raw)}")
        return raw


def normalize_token(token: str) -> str:
    """Collapse whitespace so ``[u8;8]`` and ``[u8; 8]`` are the same token."""
    token = " ".join(token.split())
    match = _ARRAY_RE.match(token)
    if match:
        return f"[{normalize_token(match.group('inner'))}; {int(match.group('count'))}]"
    return token


@cache
def layout_of(token: str) -> TypeLayout:
    """
    Resolve a type token to its byte layout.

    Raises:
        UnknownTypeError: If the token is not a supported fixed-size type
    """
    token = normalize_token(token)

    if token in PRIMITIVES:
        size, kind = PRIMITIVES[token]
        return TypeLayout(token=token, size=size, kind=kind)

    match = _ARRAY_RE.match(token)
    if match:
        element = layout_of(match.group("inner"))
        count = int(match.group("count"))
        if element.kind == "uint" and element.size == 1:
            return TypeLayout(token=token, size=count, kind="bytes")
        return TypeLayout(
            token=token,
            size=element.size * count,
            kind="array",
            element=element,
            count=count,
        )

    raise UnknownTypeError(f"Unknown type token '{token}'")


def size_of(token: str) -> int:
    return layout_of(token).size


def is_known_token(token: str) -> bool:
    try:
        layout_of(token)
    except UnknownTypeError:
        return False
    return True
