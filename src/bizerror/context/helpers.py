"""Attach business context to raised exceptions.

``biz_context`` is the exception-raising counterpart of Result.with_context:
any exception escaping its block is converted into the target taxonomy and
re-raised as a ContextualError. Errors that already carry context get the
new layer appended instead of a second wrapper.

Example:
    >>> with biz_context("loading config", AppError):
    ...     open("missing.toml")
    Traceback (most recent call last):
    ContextualError: Database connection failed
    Context: loading config

    >>> @biz_context("charging card", PaymentError)
    ... def charge(card: Card) -> Receipt: ...
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import TYPE_CHECKING, Callable, ParamSpec, TypeVar

from bizerror.observability import get_logger
from bizerror.taxonomy.classifier import convert_into

from .contextual import CONTEXT_SEPARATOR, ContextualError
from .location import capture_location

if TYPE_CHECKING:
    from types import TracebackType

P = ParamSpec("P")
T = TypeVar("T")

_log = get_logger("bizerror.context")


class biz_context:
    """Context manager and decorator wrapping escaping exceptions with context.

    As a decorator the recorded location is the call site of the decorated
    function. For a coroutine function it is the coroutine awaiting it; a
    coroutine driven directly by the event loop (asyncio.run, create_task)
    has no awaiting caller, so the location points into the loop instead.

    Args:
        context: Text attached to the escaping error
        target: Taxonomy to convert into; None requires an already classified error
    """

    __slots__ = ("_context", "_target", "_stacklevel")

    def __init__(self, context: str, target: type | None = None, *, _stacklevel: int = 1) -> None:
        self._context = context
        self._target = target
        self._stacklevel = _stacklevel

    def __enter__(self) -> biz_context:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if not isinstance(exc_val, Exception):
            return
        location = capture_location(self._stacklevel)
        if isinstance(exc_val, ContextualError):
            context = f"{exc_val.context}{CONTEXT_SEPARATOR}{self._context}"
            wrapped = ContextualError._at(exc_val.inner, context, location)
        else:
            wrapped = ContextualError._at(convert_into(exc_val, self._target), self._context, location)
        _log.debug("context attached", error=wrapped.name, code=wrapped.code, context=wrapped.context)
        raise wrapped.with_traceback(exc_tb)

    def __call__(self, func: Callable[P, T]) -> Callable[P, T]:
        scope = biz_context(self._context, self._target, _stacklevel=2)

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with scope:
                return func(*args, **kwargs)

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with scope:
                return await func(*args, **kwargs)  # type: ignore[misc]

        return async_wrapper if inspect.iscoroutinefunction(func) else wrapper  # type: ignore[return-value]
