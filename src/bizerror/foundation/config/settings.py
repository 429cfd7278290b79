"""Environment-based configuration using pydantic-settings.

Only ambient behaviour is configurable here (logging, location capture).
Taxonomy configuration is declared in code and never read from the
environment, so codes cannot drift between deployments.

Example:
    >>> from bizerror.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.context.capture_location
    True

    # Or with environment variables:
    # BIZERROR_LOG_LEVEL=DEBUG
    # BIZERROR_CONTEXT_CAPTURE_LOCATION=false
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BIZERROR_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force colored console output (None = auto-detect)")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class ContextSettings(BaseSettings):
    """Contextual wrapper behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="BIZERROR_CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    capture_location: bool = Field(
        default=True,
        description="Record file/line/column of the call that attached context",
    )


class BizErrorSettings(BaseSettings):
    """Root settings for bizerror.

    Loads configuration from environment variables with BIZERROR_ prefix.

    Example environment variables:
        BIZERROR_DEBUG=true
        BIZERROR_LOG_LEVEL=DEBUG
        BIZERROR_LOG_FORMAT=json
        BIZERROR_CONTEXT_CAPTURE_LOCATION=false
    """

    model_config = SettingsConfigDict(
        env_prefix="BIZERROR_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)

    @computed_field
    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured level."""
        return "DEBUG" if self.debug else self.logging.level


@lru_cache(maxsize=1)
def get_settings() -> BizErrorSettings:
    """Get the global settings instance (cached)."""
    return BizErrorSettings()


@lru_cache(maxsize=1)
def get_context_settings() -> ContextSettings:
    """Get the location-capture settings alone (cached).

    Loaded apart from the root settings so that a malformed logging variable
    cannot break error wrapping.
    """
    return ContextSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
    get_context_settings.cache_clear()
