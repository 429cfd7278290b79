"""Aggregate of contextual errors for batch validation.

BizErrors gathers failures instead of stopping at the first one. It is an
exception itself, so a fully populated aggregate can be raised, and it is
classified by its first error's code.

Example:
    >>> results = [validate(row) for row in rows]   # Result[Row, ContextualError[RowError]]
    >>> rows_ok, errors = BizErrors.collect_from(results)
    >>> if errors is not None:
    ...     raise errors
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Generic, TypeVar

from bizerror.foundation.errors import EmptyAggregateError
from bizerror.observability import get_logger

from .chain import ChainNavigable
from .contextual import ContextualError
from .location import capture_location

if TYPE_CHECKING:
    from bizerror.foundation.errors import Result
    from bizerror.taxonomy.codes import Code

E = TypeVar("E", bound=BaseException)
T = TypeVar("T")

_log = get_logger("bizerror.aggregate")

# Errors listed individually in repr before the remainder is summarized
_REPR_LIMIT = 3


class BizErrors(ChainNavigable, Exception, Generic[E]):
    """Ordered collection of ContextualError values, insertion order preserved."""

    def __init__(self, errors: Iterable[ContextualError[E]] = ()) -> None:
        super().__init__()
        self._errors: list[ContextualError[E]] = list(errors)
        self._sync_cause()

    # ─── Population ─────────────────────────────────────────────────────

    def push(self, error: ContextualError[E]) -> None:
        self._errors.append(error)
        self._sync_cause()

    def push_simple(self, error: E, *, stacklevel: int = 1) -> None:
        """Append error wrapped with empty context, located at the caller."""
        self.push(ContextualError._at(error, "", capture_location(stacklevel)))

    def push_with_context(self, error: E, context: str, *, stacklevel: int = 1) -> None:
        """Append error wrapped with context, located at the caller."""
        self.push(ContextualError(error, context, stacklevel=stacklevel + 1))

    @classmethod
    def from_errors(cls, errors: Iterable[ContextualError[E] | E]) -> BizErrors[E]:
        """Build from wrapped or bare errors; bare ones get empty context."""
        location = capture_location()
        return cls(e if isinstance(e, ContextualError) else ContextualError._at(e, "", location) for e in errors)

    @classmethod
    def collect_from(cls, results: Iterable[Result[T, ContextualError[E]]]) -> tuple[list[T], BizErrors[E] | None]:
        """Partition results into successes and, when anything failed, an aggregate.

        Returns None instead of an aggregate when every result succeeded.
        """
        successes: list[T] = []
        errors = cls()
        for r in results:
            if r.is_ok():
                successes.append(r.unwrap())
            else:
                errors.push(r.unwrap_err())
        _log.debug("results collected", succeeded=len(successes), failed=len(errors))
        return successes, errors if errors else None

    @classmethod
    def collect_errors(cls, results: Iterable[Result[T, ContextualError[E]]]) -> BizErrors[E] | None:
        """Like collect_from, discarding successes."""
        _, errors = cls.collect_from(results)
        return errors

    # ─── Queries ────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[ContextualError[E]]:
        return iter(self._errors)

    def __getitem__(self, index: int) -> ContextualError[E]:
        return self._errors[index]

    def is_empty(self) -> bool:
        return not self._errors

    def first(self) -> ContextualError[E] | None:
        return self._errors[0] if self._errors else None

    def last(self) -> ContextualError[E] | None:
        return self._errors[-1] if self._errors else None

    def as_list(self) -> list[ContextualError[E]]:
        return list(self._errors)

    def contains_code(self, code: Code) -> bool:
        return any(e.code == code for e in self._errors)

    def error_codes(self) -> list[Code]:
        """Distinct codes present, ordered by their repr for deterministic output."""
        return sorted({e.code for e in self._errors}, key=repr)

    def filter(self, predicate: Callable[[ContextualError[E]], bool]) -> Iterator[ContextualError[E]]:
        """Lazily yield the errors satisfying predicate."""
        return (e for e in self._errors if predicate(e))

    # ─── Classification ─────────────────────────────────────────────────

    @property
    def code(self) -> Code:
        """The first error's code. Raises EmptyAggregateError when empty."""
        if not self._errors:
            raise EmptyAggregateError()
        return self._errors[0].code

    @property
    def name(self) -> str:
        return "BizErrors"

    def _chain_cause(self) -> BaseException | None:
        return self._errors[0] if self._errors else None

    def _sync_cause(self) -> None:
        self.__cause__ = self._errors[0] if self._errors else None

    # ─── Rendering ──────────────────────────────────────────────────────

    def __str__(self) -> str:
        if not self._errors:
            return "No errors"
        if len(self._errors) == 1:
            return str(self._errors[0])
        lines = [f"Multiple errors occurred ({len(self._errors)} total):"]
        lines += [f"  {i}. {e}" for i, e in enumerate(self._errors, 1)]
        return "\n".join(lines)

    def __repr__(self) -> str:
        n = len(self._errors)
        if n == 0:
            return "BizErrors(count=0)"
        if n == 1:
            return f"BizErrors(count=1, error={self._errors[0]!r})"
        codes = [e.code for e in self._errors]
        if n <= _REPR_LIMIT:
            return f"BizErrors(count={n}, codes={codes!r}, errors={self._errors!r})"
        return (f"BizErrors(count={n}, codes={codes!r}, first_3_errors={self._errors[:_REPR_LIMIT]!r}, "
                f"note='... and {n - _REPR_LIMIT} more')")
