"""Configuration management using pydantic-settings."""

from .settings import (
    BizErrorSettings,
    ContextSettings,
    LoggingSettings,
    clear_settings_cache,
    get_context_settings,
    get_settings,
)

__all__ = [
    "BizErrorSettings",
    "ContextSettings",
    "LoggingSettings",
    "clear_settings_cache",
    "get_context_settings",
    "get_settings",
]
