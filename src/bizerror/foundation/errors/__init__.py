"""Library errors and the Result monad.

- BizErrorLibraryError and subclasses: definition-time and misuse errors
- Result/Ok/Err: monadic error handling with business-error context operations
"""

from .errors import (
    BizErrorLibraryError,
    CodeTypeError,
    ConversionError,
    EmptyAggregateError,
    ForbiddenCodeError,
    TaxonomyDefinitionError,
)
from .result import Err, Ok, Result, catch, collect_results, ok_or_biz, sequence

__all__ = [
    # Library errors
    "BizErrorLibraryError", "TaxonomyDefinitionError", "CodeTypeError", "ForbiddenCodeError",
    "ConversionError", "EmptyAggregateError",
    # Result monad
    "Result", "Ok", "Err", "catch", "ok_or_biz",
    # Collection ops
    "sequence", "collect_results",
]
