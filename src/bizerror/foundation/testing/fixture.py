"""Test fixtures for asserting on bizerror behaviour.

Provides:
- @fixture decorator for pytest fixture integration
- CaptureRenderer for recording structured log entries
- Pre-built fixtures: captured_logs, fresh_settings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar, overload

from bizerror.foundation.config import clear_settings_cache
from bizerror.observability import LogEntry, scoped_logging

if TYPE_CHECKING:
    from collections.abc import Iterator

T = TypeVar("T")
P = ParamSpec("P")


# ═════════════════════════════════════════════════════════════════════════════
# Fixture Decorator
# ═════════════════════════════════════════════════════════════════════════════


@overload
def fixture(func: Callable[P, T]) -> Callable[P, T]: ...

@overload
def fixture(
    *,
    scope: str = "function",
    autouse: bool = False,
) -> Callable[[Callable[P, T]], Callable[P, T]]: ...


def fixture(
    func: Callable[P, T] | None = None,
    *,
    scope: str = "function",
    autouse: bool = False,
) -> Callable[P, T] | Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator marking a function as a test fixture.

    Integrates with pytest when available, otherwise returns the function
    marked with its scope so it can still be called directly.
    """
    def decorator(fn: Callable[P, T]) -> Callable[P, T]:
        try:
            import pytest
            return pytest.fixture(scope=scope, autouse=autouse)(fn)  # type: ignore[return-value]
        except ImportError:
            pass

        fn._fixture_scope = scope  # type: ignore[attr-defined]
        fn._fixture_autouse = autouse  # type: ignore[attr-defined]

        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator


# ═════════════════════════════════════════════════════════════════════════════
# Log Capture
# ═════════════════════════════════════════════════════════════════════════════


@dataclass
class CaptureRenderer:
    """Renderer keeping every log entry in memory.

    Example:
        >>> capture = CaptureRenderer()
        >>> with scoped_logging(capture):
        ...     class AppError(BizError): ...
        >>> capture.assert_logged("taxonomy registered", taxonomy="AppError")
    """

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    @property
    def events(self) -> list[str]:
        return [e.event for e in self.entries]

    def find(self, event: str, **context: Any) -> list[LogEntry]:
        """Entries with the given event whose context contains every given pair."""
        return [e for e in self.entries
                if e.event == event and all(k in e.context and e.context[k] == v for k, v in context.items())]

    def assert_logged(self, event: str, **context: Any) -> LogEntry:
        """Assert a matching entry exists and return the first one."""
        if not (matches := self.find(event, **context)):
            raise AssertionError(f"No log entry {event!r} with {context}; got events {self.events}")
        return matches[0]

    def clear(self) -> None:
        self.entries.clear()


# ═════════════════════════════════════════════════════════════════════════════
# Pre-built Fixtures
# ═════════════════════════════════════════════════════════════════════════════


@fixture
def captured_logs() -> Iterator[CaptureRenderer]:
    """Capture all bizerror log entries at DEBUG level for the test's duration."""
    capture = CaptureRenderer()
    with scoped_logging(capture, level="DEBUG"):
        yield capture


@fixture
def fresh_settings() -> Iterator[None]:
    """Reload settings from the environment before and after the test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
