"""Result/Either monad with business-error context operations.

Implements a discriminated union for success/failure:
- Functor: map, map_err
- Monad: and_then (bind)
- Railway-oriented composition
- Business error adaptation: with_context, map_biz, with_context_if, and_then_biz

The context operations convert the failure into a target taxonomy (via the
taxonomy's ``convert``) and optionally wrap it in a ContextualError carrying
free-text context and the caller's source location.

Example:
    >>> catch(open, "missing.toml").with_context("loading config", AppError)
    Err(ContextualError(type='DatabaseError', code=1010, ...))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, ParamSpec, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from bizerror.context.contextual import ContextualError

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")
B = TypeVar("B")
P = ParamSpec("P")

_OK = True
_ERR = False


class Result(Generic[T, E]):
    """Discriminated union representing success (Ok) or failure (Err).

    Examples:
        >>> Ok(42).map(lambda x: x * 2).unwrap()
        84
        >>> Err("fail").map(lambda x: x * 2).unwrap_err()
        'fail'
        >>> Ok(5).and_then(lambda x: Ok(x * 2) if x > 0 else Err("neg")).unwrap()
        10
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    # ─── Type Checking ───────────────────────────────────────────────

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    # ─── Value Extraction ──────────────────────────────────────────────

    def unwrap(self) -> T:
        """Extract Ok value. Raises the error itself if it is an exception, else RuntimeError."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        if isinstance(self._value, BaseException):
            raise self._value
        raise RuntimeError(f"unwrap() on Err: {self._value}")

    def unwrap_err(self) -> E:
        """Extract Err value. Raises RuntimeError on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap_err() on Ok: {self._value}")

    def unwrap_or(self, default: T) -> T:
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        return self._value if self._is_ok else f(self._value)  # type: ignore[return-value,arg-type]

    def expect(self, msg: str) -> T:
        """Extract Ok value with custom error message."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"{msg}: {self._value}")

    def expect_err(self, msg: str) -> E:
        """Extract Err value with custom error message."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"{msg}: {self._value}")

    # ─── Functor / Monad Operations ────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Apply f to Ok value. Signature: Result[T,E] → (T→U) → Result[U,E]"""
        return Result(f(self._value), _OK) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Apply f to Err value. Signature: Result[T,E] → (E→F) → Result[T,F]"""
        return Result(f(self._value), _ERR) if not self._is_ok else Result(self._value, _OK)  # type: ignore[arg-type]

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind (>>=). Chain operations that can fail."""
        return f(self._value) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    flat_map = and_then

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """On Err, apply f to recover. On Ok, pass through."""
        return f(self._value) if not self._is_ok else Result(self._value, _OK)  # type: ignore[arg-type]

    # ─── Business Error Context ─────────────────────────────────────────

    def with_context(self, context: str, target: type[B] | None = None) -> Result[T, ContextualError[B]]:
        """On Err, convert into target and wrap with context. Ok passes through.

        With target=None the error must already be classified.

        Example:
            >>> catch(read_user, 7).with_context("loading profile", UserServiceError)
        """
        if self._is_ok:
            return Result(self._value, _OK)  # type: ignore[arg-type]
        from bizerror.context.contextual import ContextualError
        return Result(ContextualError(_convert(self._value, target), context, stacklevel=2), _ERR)

    def map_biz(self, target: type[B] | None = None) -> Result[T, B]:
        """On Err, convert into target without wrapping."""
        if self._is_ok:
            return Result(self._value, _OK)  # type: ignore[arg-type]
        return Result(_convert(self._value, target), _ERR)

    def with_context_if(
        self, condition: bool, context: str, target: type[B] | None = None,
    ) -> Result[T, ContextualError[B]]:
        """Like with_context when condition holds; otherwise the context is NO_CONTEXT."""
        if self._is_ok:
            return Result(self._value, _OK)  # type: ignore[arg-type]
        from bizerror.context.contextual import NO_CONTEXT, ContextualError
        return Result(
            ContextualError(_convert(self._value, target), context if condition else NO_CONTEXT, stacklevel=2),
            _ERR,
        )

    def and_then_biz(self, f: Callable[[T], Result[U, B]], target: type[B] | None = None) -> Result[U, B]:
        """On Ok, call f. On Err, convert into target and skip f."""
        if self._is_ok:
            return f(self._value)  # type: ignore[arg-type]
        return Result(_convert(self._value, target), _ERR)

    # ─── Inspection & Utilities ──────────────────────────────────────────

    def ok(self) -> T | None:
        """Some(T) if Ok, None if Err."""
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def err(self) -> E | None:
        """Some(E) if Err, None if Ok."""
        return self._value if not self._is_ok else None  # type: ignore[return-value]

    def inspect_err(self, f: Callable[[E], None]) -> Result[T, E]:
        """Call f with Err value for side effects, return self."""
        if not self._is_ok:
            f(self._value)  # type: ignore[arg-type]
        return self

    def match(self, *, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        """Exhaustive pattern match. Forces handling both Ok and Err."""
        return ok(self._value) if self._is_ok else err(self._value)  # type: ignore[arg-type]

    # ─── Dunder Methods ──────────────────────────────────────────────────

    __bool__ = lambda self: self._is_ok  # noqa: E731
    __repr__ = lambda self: f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"  # noqa: E731
    __str__ = __repr__

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))

    def __eq__(self, other: object) -> bool:
        return self._is_ok == other._is_ok and self._value == other._value if isinstance(other, Result) else NotImplemented

    def __iter__(self) -> Iterator[T]:
        """Iterate: yields value if Ok, nothing if Err."""
        if self._is_ok:
            yield self._value  # type: ignore[misc]


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Construct Ok variant (success)."""
    return Result(value, _OK)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Construct Err variant (failure)."""
    return Result(error, _ERR)


def catch(fn: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> Result[T, Exception]:
    """Call fn, returning Ok(value) or Err(exception) instead of raising."""
    try:
        return Result(fn(*args, **kwargs), _OK)
    except Exception as e:
        return Result(e, _ERR)


def ok_or_biz(value: T | None, error: B) -> Result[T, B]:
    """Ok(value) unless value is None, then Err(error)."""
    return Result(value, _OK) if value is not None else Result(error, _ERR)  # type: ignore[arg-type]


# ═══════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═══════════════════════════════════════════════════════════════════════════════


def sequence(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Iterable[Result[T,E]] → Result[List[T], E]. Fail-fast on first Err."""
    values: list[T] = []
    for r in results:
        if not r._is_ok:
            return Result(r._value, _ERR)  # type: ignore[arg-type]
        values.append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK)


def collect_results(results: Iterable[Result[T, E]]) -> Result[list[T], list[E]]:
    """Collect all Results, accumulating ALL errors (not fail-fast)."""
    values: list[T] = []
    errors: list[E] = []
    for r in results:
        (values if r._is_ok else errors).append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK) if not errors else Result(errors, _ERR)


def _convert(error: object, target: type | None) -> object:
    from bizerror.taxonomy.classifier import convert_into
    return convert_into(error, target)
