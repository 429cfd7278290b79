"""Foundation - building blocks shared by the rest of bizerror.

Contains: library errors, the Result monad, configuration, test helpers.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "BizErrorLibraryError", "TaxonomyDefinitionError", "CodeTypeError", "ForbiddenCodeError",
    "ConversionError", "EmptyAggregateError",
    "Result", "Ok", "Err", "catch", "ok_or_biz", "sequence", "collect_results",
    # Config
    "BizErrorSettings", "ContextSettings", "LoggingSettings",
    "get_settings", "get_context_settings", "clear_settings_cache",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("BizErrorLibraryError", "TaxonomyDefinitionError", "CodeTypeError", "ForbiddenCodeError",
                "ConversionError", "EmptyAggregateError",
                "Result", "Ok", "Err", "catch", "ok_or_biz", "sequence", "collect_results"):
        from . import errors
        return getattr(errors, name)

    if name in ("BizErrorSettings", "ContextSettings", "LoggingSettings",
                "get_settings", "get_context_settings", "clear_settings_cache"):
        from . import config
        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
