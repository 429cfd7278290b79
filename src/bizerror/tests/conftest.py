"""Shared pytest fixtures."""

from bizerror.foundation.testing import captured_logs, fresh_settings  # noqa: F401
