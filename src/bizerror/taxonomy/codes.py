"""Code representations and per-taxonomy configuration.

A taxonomy picks one code type for all of its variants. Integer types carry
a fixed range, string codes accept any text and render auto codes in decimal.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bizerror.foundation.errors import CodeTypeError, TaxonomyDefinitionError

Code: TypeAlias = int | str


class CodeType(StrEnum):
    """Supported code representations."""
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    STR = "str"

    @property
    def is_numeric(self) -> bool:
        return self is not CodeType.STR

    @property
    def bounds(self) -> tuple[int, int] | None:
        """Inclusive (min, max) for integer types, None for strings."""
        return _BOUNDS.get(self)


_BOUNDS: dict[CodeType, tuple[int, int]] = {
    CodeType.U8: (0, 2**8 - 1),
    CodeType.U16: (0, 2**16 - 1),
    CodeType.U32: (0, 2**32 - 1),
    CodeType.U64: (0, 2**64 - 1),
    CodeType.I8: (-(2**7), 2**7 - 1),
    CodeType.I16: (-(2**15), 2**15 - 1),
    CodeType.I32: (-(2**31), 2**31 - 1),
    CodeType.I64: (-(2**63), 2**63 - 1),
}

# Spellings accepted for code_type besides the enum values
_ALIASES: dict[str, CodeType] = {
    "int": CodeType.I64,
    "string": CodeType.STR,
    "&str": CodeType.STR,
    "&'static str": CodeType.STR,
}


class TaxonomyConfig(BaseModel):
    """Configuration shared by every variant of one taxonomy.

    Attributes:
        code_type: Representation of codes in this taxonomy
        auto_start: Code handed to the first variant without an explicit code
        auto_increment: Step between consecutive auto codes (may be negative or zero)
        allow_zero: Whether an explicit code equal to zero is accepted
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "title": "Taxonomy Config",
            "examples": [{"code_type": "u32", "auto_start": 1000, "auto_increment": 10}],
        },
    )

    code_type: CodeType = CodeType.U32
    auto_start: int = Field(default=0, description="First auto-assigned code")
    auto_increment: int = Field(default=1, description="Step between auto-assigned codes")
    allow_zero: bool = Field(default=True, description="Accept an explicit code of zero")

    @field_validator("code_type", mode="before")
    @classmethod
    def _resolve_alias(cls, v: object) -> object:
        if isinstance(v, str):
            key = v.strip()
            return _ALIASES.get(key, key.lower())
        if v is int:
            return CodeType.I64
        if v is str:
            return CodeType.STR
        return v

    @classmethod
    def build(cls, taxonomy: str | None = None, **options: object) -> TaxonomyConfig:
        """Validate options into a config, reporting failures as definition errors."""
        try:
            return cls.model_validate(options)
        except ValidationError as e:
            fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            exc_type = CodeTypeError if fields == {"code_type"} else TaxonomyDefinitionError
            raise exc_type(f"invalid taxonomy configuration: {_summarize(e)}", taxonomy=taxonomy) from e


def _summarize(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(map(str, err['loc'])) or 'config'}: {err['msg']}" for err in e.errors())


def coerce_code(value: Code, code_type: CodeType, *, taxonomy: str | None = None, variant: str | None = None) -> Code:
    """Coerce a code literal to the configured representation.

    Integers become decimal strings for string taxonomies. Integer taxonomies
    reject strings, bools and values outside the type's range.
    """
    if code_type is CodeType.STR:
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise CodeTypeError(f"code {value!r} is not an int or str", taxonomy=taxonomy, variant=variant)
        return value if isinstance(value, str) else str(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CodeTypeError(
            f"code {value!r} does not match code type {code_type.value}", taxonomy=taxonomy, variant=variant,
        )
    lo, hi = _BOUNDS[code_type]
    if not lo <= value <= hi:
        raise CodeTypeError(
            f"code {value} out of range for {code_type.value} [{lo}, {hi}]", taxonomy=taxonomy, variant=variant,
        )
    return value
