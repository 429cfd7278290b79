"""Contextual wrapping, chain navigation and aggregation of classified errors."""

from .aggregate import BizErrors
from .chain import (
    ChainNavigable,
    cause_of,
    chain_contains_code,
    chain_depth,
    contains_error,
    error_chain_messages,
    find_root,
    iter_chain,
    root_cause,
    root_cause_message,
)
from .contextual import CONTEXT_SEPARATOR, NO_CONTEXT, ContextualError
from .helpers import biz_context
from .location import Location, capture_location

__all__ = [
    # Wrapper
    "ContextualError", "NO_CONTEXT", "CONTEXT_SEPARATOR", "Location", "capture_location",
    # Chain navigation
    "ChainNavigable", "cause_of", "iter_chain", "chain_depth", "root_cause", "root_cause_message",
    "find_root", "contains_error", "error_chain_messages", "chain_contains_code",
    # Aggregation
    "BizErrors",
    # Raised-exception helpers
    "biz_context",
]
