"""bizerror - Classified business errors with context and chain navigation.

Every business error carries a stable code, a variant name and a display
message. Errors can be wrapped with free-text context and the call-site
location, navigated along their cause chain, and gathered into aggregates
for batch validation.

Declaring a Taxonomy:
    >>> from bizerror import BizError
    >>>
    >>> class UserServiceError(BizError, auto_start=1000):
    ...     '''User service errors.'''
    >>>
    >>> class UserNotFound(UserServiceError, message="User not found: {user_id}"):
    ...     user_id: int
    >>>
    >>> class InvalidEmail(UserServiceError, code=1100, message="Invalid email format: {email}"):
    ...     email: str
    >>>
    >>> class DatabaseError(UserServiceError, message="Database error: {0}", wraps=OSError):
    ...     pass
    >>>
    >>> UserServiceError.code_table()
    CodeTable({'UserNotFound': 1000, 'InvalidEmail': 1100, 'DatabaseError': 1001})

Adding Context:
    >>> err = UserNotFound(user_id=42).with_context("loading profile")
    >>> err.add_context("rendering page").context
    'loading profile -> rendering page'

Result Pipelines:
    >>> from bizerror import catch
    >>> catch(open, "users.db").with_context("opening user store", UserServiceError)
    Err(ContextualError(type='DatabaseError', code=1001, ...))

Batch Validation:
    >>> from bizerror import BizErrors
    >>> values, errors = BizErrors.collect_from(validate(row) for row in rows)
"""

from __future__ import annotations

__version__ = "0.1.3"

# Library errors & Result monad
from .foundation.errors import (
    BizErrorLibraryError,
    CodeTypeError,
    ConversionError,
    EmptyAggregateError,
    Err,
    ForbiddenCodeError,
    Ok,
    Result,
    TaxonomyDefinitionError,
    catch,
    collect_results,
    ok_or_biz,
    sequence,
)

# Taxonomy
from .taxonomy import (
    BizError,
    Classified,
    Code,
    CodeTable,
    CodeType,
    TaxonomyConfig,
    VariantDeclaration,
    assign_codes,
    convert_into,
    is_classified,
)

# Context, chains, aggregates
from .context import (
    CONTEXT_SEPARATOR,
    NO_CONTEXT,
    BizErrors,
    ContextualError,
    Location,
    biz_context,
    chain_contains_code,
    chain_depth,
    contains_error,
    error_chain_messages,
    find_root,
    iter_chain,
    root_cause,
    root_cause_message,
)

# Config & logging
from .foundation.config import BizErrorSettings, clear_settings_cache, get_settings
from .observability import configure_from_settings, configure_logging, get_logger

__all__ = [
    "__version__",
    # Taxonomy
    "BizError", "Classified", "Code", "CodeType", "TaxonomyConfig", "VariantDeclaration",
    "CodeTable", "assign_codes", "convert_into", "is_classified",
    # Context
    "ContextualError", "NO_CONTEXT", "CONTEXT_SEPARATOR", "Location", "biz_context",
    # Chain navigation
    "iter_chain", "chain_depth", "root_cause", "root_cause_message", "find_root", "contains_error",
    "error_chain_messages", "chain_contains_code",
    # Aggregation
    "BizErrors",
    # Result monad
    "Result", "Ok", "Err", "catch", "ok_or_biz", "sequence", "collect_results",
    # Library errors
    "BizErrorLibraryError", "TaxonomyDefinitionError", "CodeTypeError", "ForbiddenCodeError",
    "ConversionError", "EmptyAggregateError",
    # Config & logging
    "BizErrorSettings", "get_settings", "clear_settings_cache",
    "configure_logging", "configure_from_settings", "get_logger",
]
