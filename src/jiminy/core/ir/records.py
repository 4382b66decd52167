"""
Persistent record layouts for Jiminy IR.

A record's field order and sizes are its storage format: reordering or
resizing fields breaks accounts that already hold data.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RecordField(BaseModel):
    """A record field; the type token is kept verbatim."""

    name: str
    type_token: str

    model_config = ConfigDict(frozen=True)


class RecordSpec(BaseModel):
    """A fixed-layout state record."""

    name: str
    fields: list[RecordField] = Field(default_factory=list)
    source: str | None = None

    model_config = ConfigDict(frozen=True)
