"""Errors raised by bizerror itself.

These are not business errors. They signal a malformed taxonomy, a missing
conversion between taxonomies, or misuse of an aggregate, and are meant to
surface loudly during development rather than be handled at runtime.
"""

from __future__ import annotations


class BizErrorLibraryError(Exception):
    """Base class for every error raised by the bizerror library."""


class TaxonomyDefinitionError(BizErrorLibraryError, TypeError):
    """Malformed taxonomy declaration, raised while the class statement runs.

    Attributes:
        taxonomy: Name of the taxonomy root being defined (if known)
        variant: Name of the offending variant (if any)
    """

    def __init__(self, message: str, *, taxonomy: str | None = None, variant: str | None = None) -> None:
        self.taxonomy = taxonomy
        self.variant = variant
        where = ".".join(p for p in (taxonomy, variant) if p)
        super().__init__(f"{where}: {message}" if where else message)


class CodeTypeError(TaxonomyDefinitionError):
    """Code type unsupported, or a code literal that does not fit it."""


class ForbiddenCodeError(TaxonomyDefinitionError):
    """Explicit code rejected by the taxonomy's configuration."""


class ConversionError(BizErrorLibraryError, TypeError):
    """No conversion exists from a source error into the target taxonomy."""

    def __init__(self, source: object, target: type | None = None) -> None:
        self.source = source
        self.target = target
        if target is None:
            message = f"{type(source).__name__} is not a classified error; pass a target taxonomy to convert it"
        else:
            message = (f"cannot convert {type(source).__name__} into {target.__name__}: "
                       f"no variant of {target.__name__} wraps it")
        super().__init__(message)


class EmptyAggregateError(BizErrorLibraryError, LookupError):
    """Code requested from an aggregate that holds no errors."""

    def __init__(self) -> None:
        super().__init__("BizErrors is empty; check is_empty() before asking for its code")
