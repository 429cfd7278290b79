"""Deterministic code assignment for taxonomy variants.

Explicit codes are taken verbatim (after coercion to the taxonomy's code
type). Every other variant receives ``auto_start + auto_increment * k``,
where ``k`` counts only the variants without an explicit code, in
declaration order. Duplicate codes are allowed and never rejected.

Example:
    >>> cfg = TaxonomyConfig(auto_start=100, auto_increment=10)
    >>> table = assign_codes([VariantDeclaration(name="A"),
    ...                       VariantDeclaration(name="B", code=999),
    ...                       VariantDeclaration(name="C")], cfg)
    >>> dict(table)
    {'A': 100, 'B': 999, 'C': 110}
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from bizerror.foundation.errors import ForbiddenCodeError, TaxonomyDefinitionError

from .codes import Code, TaxonomyConfig, coerce_code

Shape = Literal["unit", "positional", "named"]


class VariantDeclaration(BaseModel):
    """One error case of a taxonomy, as declared.

    Attributes:
        name: Variant identifier, unique within its taxonomy
        code: Explicit code literal, or None for auto-assignment
        message: Format template rendered into the display message
        shape: Payload structure (no payload, positional, named fields)
        fields: Named payload fields in declaration order
        wraps: Exception types this variant is built from during conversion
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    name: Annotated[str, Field(min_length=1)]
    code: int | str | None = None
    message: str = ""
    shape: Shape = "unit"
    fields: tuple[str, ...] = ()
    wraps: tuple[type[BaseException], ...] = ()

    @property
    def is_explicit(self) -> bool:
        return self.code is not None


class CodeTable(Mapping[str, Code]):
    """Read-only mapping of variant name to effective code, in declaration order."""

    __slots__ = ("_codes", "_explicit")

    def __init__(self, codes: Mapping[str, Code], explicit: frozenset[str] = frozenset()) -> None:
        self._codes = MappingProxyType(dict(codes))
        self._explicit = explicit

    def __getitem__(self, name: str) -> Code:
        return self._codes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __repr__(self) -> str:
        return f"CodeTable({dict(self._codes)!r})"

    def is_explicit(self, name: str) -> bool:
        """Whether the variant's code was declared rather than auto-assigned."""
        if name not in self._codes:
            raise KeyError(name)
        return name in self._explicit

    def names_for(self, code: Code) -> list[str]:
        """All variants carrying code, in declaration order."""
        return [name for name, c in self._codes.items() if c == code]

    def duplicates(self) -> dict[Code, list[str]]:
        """Codes shared by two or more variants. Informational only."""
        seen: dict[Code, list[str]] = {}
        for name, code in self._codes.items():
            seen.setdefault(code, []).append(name)
        return {code: names for code, names in seen.items() if len(names) > 1}


def assign_codes(
    declarations: Iterable[VariantDeclaration],
    config: TaxonomyConfig | None = None,
    *,
    taxonomy: str | None = None,
) -> CodeTable:
    """Compute the effective code of every declared variant.

    Args:
        declarations: Variants in declaration order
        config: Taxonomy configuration (defaults: u32, start 0, increment 1)
        taxonomy: Taxonomy name, used in error messages only

    Raises:
        ForbiddenCodeError: Explicit zero in a taxonomy with allow_zero=False
        CodeTypeError: Literal of the wrong kind or out of range
        TaxonomyDefinitionError: Two variants share a name
    """
    cfg = config or TaxonomyConfig()
    codes: dict[str, Code] = {}
    explicit: set[str] = set()
    counter = 0
    for decl in declarations:
        if decl.name in codes:
            raise TaxonomyDefinitionError("duplicate variant name", taxonomy=taxonomy, variant=decl.name)
        if decl.code is not None:
            if not cfg.allow_zero and _is_zero(decl.code):
                raise ForbiddenCodeError("error code cannot be 0", taxonomy=taxonomy, variant=decl.name)
            codes[decl.name] = coerce_code(decl.code, cfg.code_type, taxonomy=taxonomy, variant=decl.name)
            explicit.add(decl.name)
            continue
        raw = cfg.auto_start + counter * cfg.auto_increment
        codes[decl.name] = coerce_code(raw, cfg.code_type, taxonomy=taxonomy, variant=decl.name)
        counter += 1
    return CodeTable(codes, frozenset(explicit))


def _is_zero(code: Code) -> bool:
    return isinstance(code, int) and not isinstance(code, bool) and code == 0
