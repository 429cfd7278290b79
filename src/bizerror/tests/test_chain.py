"""Tests for error chain navigation."""

from __future__ import annotations

from bizerror import BizError, ContextualError
from bizerror.context import (
    cause_of,
    chain_contains_code,
    chain_depth,
    error_chain_messages,
    find_root,
    iter_chain,
    root_cause,
)


class AppError(BizError, auto_start=1000, auto_increment=10):
    pass


class UserNotFound(AppError, message="User not found: {user_id}"):
    user_id: int


class DatabaseError(AppError, message="Database connection failed", wraps=OSError):
    pass


class ApiError(BizError, code_type="str"):
    pass


class BackendFailed(ApiError, code="BACKEND", message="backend failed", wraps=AppError):
    pass


def startup_failure() -> ContextualError[DatabaseError]:
    """Three levels: context wrapper -> DatabaseError -> OSError."""
    return ContextualError(DatabaseError(OSError("config.toml not found")), "Application startup failed")


# ═════════════════════════════════════════════════════════════════════════════
# Traversal
# ═════════════════════════════════════════════════════════════════════════════


def test_three_level_chain() -> None:
    err = startup_failure()

    assert err.chain_depth() == 3
    assert err.root_cause_message() == "config.toml not found"
    assert isinstance(err.root_cause(), OSError)
    assert [type(n).__name__ for n in err.chain()] == ["ContextualError", "DatabaseError", "OSError"]


def test_error_chain_messages() -> None:
    messages = startup_failure().error_chain_messages()

    assert messages == [
        "Database connection failed\nContext: Application startup failed",
        "Database connection failed",
        "config.toml not found",
    ]


def test_single_node_chain() -> None:
    err = UserNotFound(user_id=1)

    assert chain_depth(err) == 1
    assert root_cause(err) is err
    assert cause_of(err) is None


def test_find_root_excludes_self() -> None:
    err = startup_failure()

    assert isinstance(err.find_root(OSError), OSError)
    assert isinstance(err.find_root(AppError), DatabaseError)
    assert err.find_root(ContextualError) is None
    assert err.find_root(ApiError) is None
    assert err.contains_error(DatabaseError)
    assert not err.contains_error(KeyError)


def test_chain_contains_code() -> None:
    err = startup_failure()

    assert err.chain_contains_code(1010)
    assert not err.chain_contains_code(1000)


def test_chain_across_taxonomies() -> None:
    translated = BackendFailed(DatabaseError(OSError("down")))

    assert isinstance(translated.__cause__, DatabaseError)
    assert chain_contains_code(translated, "BACKEND")
    assert chain_contains_code(translated, 1010)
    assert chain_depth(translated) == 3


# ═════════════════════════════════════════════════════════════════════════════
# Plain Exceptions
# ═════════════════════════════════════════════════════════════════════════════


def test_implicit_context_is_followed() -> None:
    try:
        try:
            raise KeyError("missing")
        except KeyError:
            raise ValueError("bad value")
    except ValueError as e:
        err = e

    assert chain_depth(err) == 2
    assert isinstance(find_root(err, KeyError), KeyError)


def test_suppressed_context_is_not_followed() -> None:
    err = ValueError("outer")
    err.__context__ = KeyError("hidden")
    err.__suppress_context__ = True

    assert chain_depth(err) == 1


def test_cycles_terminate() -> None:
    a, b = ValueError("a"), ValueError("b")
    a.__context__, b.__context__ = b, a

    assert [str(n) for n in iter_chain(a)] == ["a", "b"]
    assert error_chain_messages(b) == ["b", "a"]
