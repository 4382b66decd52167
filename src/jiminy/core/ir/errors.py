"""
Error domain descriptors for Jiminy IR.

Declaration syntax:

    CounterProgramError = define_errors(\"\"\"
        CounterProgramError,
        InvalidDiscriminator = 6001,
        Unauthorized = 6002,
    \"\"\")
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_DISCRIMINATOR_VARIANT = "InvalidDiscriminator"
UNKNOWN_DISCRIMINATOR_CODE = 6001


class ErrorVariant(BaseModel):
    """A named error code."""

    name: str
    code: int = Field(ge=0, le=0xFFFF_FFFF)

    model_config = ConfigDict(frozen=True)


class ErrorDomainSpec(BaseModel):
    """
    A program error table.

    Attributes:
        name: Enum name (e.g. CounterProgramError)
        variants: Variants in declaration order, codes unique
        source: Source file the declaration came from, if any
    """

    name: str
    variants: list[ErrorVariant] = Field(default_factory=list)
    source: str | None = None

    model_config = ConfigDict(frozen=True)

    def get_variant(self, name: str) -> ErrorVariant | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None

    @property
    def unknown_discriminator(self) -> ErrorVariant | None:
        return self.get_variant(UNKNOWN_DISCRIMINATOR_VARIANT)

    def with_reserved_variant(self) -> ErrorDomainSpec:
        """Return this domain with an ``InvalidDiscriminator`` variant first."""
        if self.unknown_discriminator is not None:
            return self

        codes = {v.code for v in self.variants}
        code = UNKNOWN_DISCRIMINATOR_CODE
        if code in codes:
            code = max(codes) + 1
        reserved = ErrorVariant(name=UNKNOWN_DISCRIMINATOR_VARIANT, code=code)
        return self.model_copy(update={"variants": [reserved, *self.variants]})
