"""
Jiminy Intermediate Representation (IR) types.

Immutable descriptors produced by the declaration parsers and consumed by
the code generator and the runtime.
"""

from .errors import (
    UNKNOWN_DISCRIMINATOR_CODE,
    UNKNOWN_DISCRIMINATOR_VARIANT,
    ErrorDomainSpec,
    ErrorVariant,
)
from .instructions import AccountSlot, Capability, DataField, InstructionSpec
from .program import ProgramSpec
from .records import RecordField, RecordSpec

__all__ = [
    # Instructions
    "AccountSlot",
    "Capability",
    "DataField",
    "InstructionSpec",
    # Errors
    "ErrorDomainSpec",
    "ErrorVariant",
    "UNKNOWN_DISCRIMINATOR_CODE",
    "UNKNOWN_DISCRIMINATOR_VARIANT",
    # Records
    "RecordField",
    "RecordSpec",
    # Program
    "ProgramSpec",
]
