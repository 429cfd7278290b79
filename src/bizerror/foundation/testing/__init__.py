"""Testing utilities for code built on bizerror."""

from .fixture import CaptureRenderer, captured_logs, fixture, fresh_settings

__all__ = ["CaptureRenderer", "captured_logs", "fixture", "fresh_settings"]
