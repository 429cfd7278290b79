"""Contextual wrapper for classified errors.

A ContextualError adds free-text context and the call-site location to a
classified error without changing its classification: ``code`` and ``name``
always come from the wrapped error, and the wrapped error is always the
wrapper's cause.

Example:
    >>> err = UserNotFound(user_id=7).with_context("loading profile")
    >>> err = err.add_context("rendering dashboard")
    >>> err.context
    'loading profile -> rendering dashboard'
    >>> err.code
    1000
    >>> print(err)
    User not found: 7
    Context: loading profile -> rendering dashboard
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Generic, TypeVar

from bizerror.foundation.errors import ConversionError
from bizerror.taxonomy.classifier import is_classified

from .chain import ChainNavigable
from .location import Location, capture_location

if TYPE_CHECKING:
    from bizerror.taxonomy.codes import Code

E = TypeVar("E", bound=BaseException)

NO_CONTEXT: Final = "no context"
"""Context stored by Result.with_context_if when its condition is false."""

CONTEXT_SEPARATOR: Final = " -> "


class ContextualError(ChainNavigable, Exception, Generic[E]):
    """A classified error plus context and the location that attached it.

    Attributes:
        inner: The wrapped error (exclusively owned by this wrapper)
        context: Free-text context; layers are joined with " -> "
        location: Where the most recent context was attached
    """

    def __init__(self, error: E, context: str, *, stacklevel: int = 1) -> None:
        if not isinstance(error, BaseException) or not is_classified(error):
            raise ConversionError(error)
        super().__init__(error, context)
        self._error = error
        self._context = str(context)
        self._location = capture_location(stacklevel)
        self.__cause__ = error

    @classmethod
    def _at(cls, error: E, context: str, location: Location) -> ContextualError[E]:
        """Build a wrapper with an already captured location."""
        if not isinstance(error, BaseException) or not is_classified(error):
            raise ConversionError(error)
        wrapper = cls.__new__(cls)
        Exception.__init__(wrapper, error, context)
        wrapper._error, wrapper._context, wrapper._location = error, context, location
        wrapper.__cause__ = error
        return wrapper

    # ─── Accessors ──────────────────────────────────────────────────────

    @property
    def inner(self) -> E:
        return self._error

    @property
    def context(self) -> str:
        return self._context

    @property
    def location(self) -> Location:
        return self._location

    @property
    def code(self) -> Code:
        return self._error.code  # type: ignore[attr-defined]

    @property
    def name(self) -> str:
        return self._error.name  # type: ignore[attr-defined]

    # ─── Transformations ────────────────────────────────────────────────

    def add_context(self, additional: str, *, stacklevel: int = 1) -> ContextualError[E]:
        """New wrapper around the same error with context "<old> -> <additional>".

        The location is captured afresh; the previous one is discarded.
        """
        return type(self)._at(
            self._error, f"{self._context}{CONTEXT_SEPARATOR}{additional}", capture_location(stacklevel),
        )

    def into_inner(self) -> E:
        """The bare wrapped error, dropping context and location."""
        return self._error

    def _chain_cause(self) -> BaseException | None:
        return self._error

    # ─── Rendering ──────────────────────────────────────────────────────

    def __str__(self) -> str:
        return f"{self._error}\nContext: {self._context}"

    def __repr__(self) -> str:
        return (f"ContextualError(type={self.name!r}, code={self.code!r}, message={str(self._error)!r}, "
                f"context={self._context!r}, location={str(self._location)!r})")

    def __reduce__(self):
        return (type(self)._at, (self._error, self._context, self._location))
