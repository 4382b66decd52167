"""
Program descriptor - the root of the Jiminy IR.

Aggregates every instruction, error domain and record found in a program's
sources. This is what the code generator consumes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorDomainSpec
from .instructions import InstructionSpec
from .records import RecordSpec


class ProgramSpec(BaseModel):
    """
    Complete program declaration set.

    Attributes:
        name: Program name (from jiminy.toml)
        program_id: Base58 program address
        instructions: Instructions sorted by ascending discriminator
        errors: Error domains in discovery order
        records: State records in discovery order
    """

    name: str
    program_id: str
    instructions: list[InstructionSpec] = Field(default_factory=list)
    errors: list[ErrorDomainSpec] = Field(default_factory=list)
    records: list[RecordSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

