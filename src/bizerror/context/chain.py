"""Forward traversal of error cause chains.

The cause of a node is:
- the wrapped error, for a ContextualError
- the first collected error, for a BizErrors aggregate
- ``__cause__``, else ``__context__`` unless suppressed, for any other exception

Traversal runs from the starting node towards the root cause and never
visits a node twice, so cyclic ``__context__`` links terminate.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TypeVar

from bizerror.taxonomy.classifier import is_classified
from bizerror.taxonomy.codes import Code

T = TypeVar("T", bound=BaseException)


class ChainNavigable:
    """Mixin giving an error chain-navigation methods.

    Subclasses override _chain_cause() to name their immediate cause.
    """

    __slots__ = ()

    def _chain_cause(self) -> BaseException | None:
        return _generic_cause(self)  # type: ignore[arg-type]

    def chain(self) -> Iterator[BaseException]:
        """Every node from self to the root cause."""
        return iter_chain(self)  # type: ignore[arg-type]

    def chain_depth(self) -> int:
        return chain_depth(self)  # type: ignore[arg-type]

    def root_cause(self) -> BaseException:
        return root_cause(self)  # type: ignore[arg-type]

    def root_cause_message(self) -> str:
        return root_cause_message(self)  # type: ignore[arg-type]

    def find_root(self, error_type: type[T]) -> T | None:
        return find_root(self, error_type)  # type: ignore[arg-type]

    def contains_error(self, error_type: type[BaseException]) -> bool:
        return contains_error(self, error_type)  # type: ignore[arg-type]

    def error_chain_messages(self) -> list[str]:
        return error_chain_messages(self)  # type: ignore[arg-type]

    def chain_contains_code(self, code: Code) -> bool:
        return chain_contains_code(self, code)  # type: ignore[arg-type]


def cause_of(error: BaseException) -> BaseException | None:
    """Immediate predecessor of error in its chain, or None at the root."""
    if isinstance(error, ChainNavigable):
        return error._chain_cause()
    return _generic_cause(error)


def _generic_cause(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    return None if error.__suppress_context__ else error.__context__


def iter_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield error, its cause, the cause's cause, ... stopping at the root or a revisit."""
    seen: set[int] = set()
    node: BaseException | None = error
    while node is not None and id(node) not in seen:
        seen.add(id(node))
        yield node
        node = cause_of(node)


def chain_depth(error: BaseException) -> int:
    """Number of nodes in the chain, error included."""
    return sum(1 for _ in iter_chain(error))


def root_cause(error: BaseException) -> BaseException:
    """Last node of the chain (error itself when it has no cause)."""
    for node in iter_chain(error):
        last = node
    return last


def root_cause_message(error: BaseException) -> str:
    return str(root_cause(error))


def find_root(error: BaseException, error_type: type[T]) -> T | None:
    """Nearest cause (error itself excluded) that is an instance of error_type."""
    chain = iter_chain(error)
    next(chain)
    return next((node for node in chain if isinstance(node, error_type)), None)


def contains_error(error: BaseException, error_type: type[BaseException]) -> bool:
    """Whether any cause of error is an instance of error_type."""
    return find_root(error, error_type) is not None


def error_chain_messages(error: BaseException) -> list[str]:
    """Display string of every node, from error down to the root cause."""
    return [str(node) for node in iter_chain(error)]


def chain_contains_code(error: BaseException, code: Code) -> bool:
    """Whether any classified node, error included, carries code. Nearest match wins."""
    for node in iter_chain(error):
        if is_classified(node) and node.code == code:  # type: ignore[attr-defined]
            return True
    return False
