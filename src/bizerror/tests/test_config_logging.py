"""Tests for environment settings and structured logging."""

from __future__ import annotations

import contextvars
import io

import orjson
import pytest

from bizerror.foundation.config import BizErrorSettings, LoggingSettings, get_settings
from bizerror.foundation.testing import CaptureRenderer
from bizerror.observability import (
    ConsoleRenderer,
    JsonRenderer,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
    scoped_logging,
)


# ═════════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════════


def test_default_settings(fresh_settings: None) -> None:
    settings = get_settings()

    assert settings.context.capture_location is True
    assert settings.logging.format == "console"
    assert get_settings() is settings


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch, fresh_settings: None) -> None:
    monkeypatch.setenv("BIZERROR_LOG_LEVEL", "debug")
    monkeypatch.setenv("BIZERROR_LOG_FORMAT", "json")
    monkeypatch.setenv("BIZERROR_CONTEXT_CAPTURE_LOCATION", "0")

    settings = get_settings()
    assert settings.logging.level == "DEBUG"
    assert settings.logging.format == "json"
    assert settings.context.capture_location is False


def test_debug_mode_lowers_effective_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BIZERROR_LOG_LEVEL", "ERROR")
    assert BizErrorSettings().effective_log_level == "ERROR"

    monkeypatch.setenv("BIZERROR_DEBUG", "true")
    assert BizErrorSettings().effective_log_level == "DEBUG"


def test_invalid_log_format_rejected() -> None:
    with pytest.raises(ValueError):
        LoggingSettings(format="xml")  # type: ignore[arg-type]


# ═════════════════════════════════════════════════════════════════════════════
# Logger
# ═════════════════════════════════════════════════════════════════════════════


def test_bind_returns_new_logger() -> None:
    base = get_logger("orders")
    bound = base.bind(taxonomy="OrderError")

    assert bound.context == {"logger": "orders", "taxonomy": "OrderError"}
    assert base.context == {"logger": "orders"}
    assert bound.unbind("taxonomy").context == base.context


def test_level_filtering() -> None:
    capture = CaptureRenderer()
    log = get_logger("filtering")

    with scoped_logging(capture, level="WARNING"):
        log.debug("hidden")
        log.warning("shown", code=7)

    assert capture.events == ["shown"]
    assert capture.entries[0].level == "warning"
    assert capture.entries[0].context == {"logger": "filtering", "code": 7}


def test_default_level_silences_debug() -> None:
    capture = CaptureRenderer()

    def run() -> None:
        configure_logging(renderer=capture, level="WARNING")
        get_logger("quiet").debug("variant registered")

    contextvars.copy_context().run(run)
    assert capture.entries == []


def test_log_context_scopes_extra_fields() -> None:
    capture = CaptureRenderer()
    log = get_logger("scoped")

    with scoped_logging(capture):
        with log_context(request_id="r-1"):
            log.debug("inside")
        log.debug("outside")

    assert capture.find("inside", request_id="r-1")
    assert "request_id" not in capture.assert_logged("outside").context


# ═════════════════════════════════════════════════════════════════════════════
# Renderers & Configuration
# ═════════════════════════════════════════════════════════════════════════════


def test_json_renderer() -> None:
    buf = io.StringIO()

    with scoped_logging(JsonRenderer(output=buf)):
        get_logger("bizerror.taxonomy").debug("variant registered", code=1000, variants=["A", "B"])

    record = orjson.loads(buf.getvalue())
    assert record["event"] == "variant registered"
    assert record["level"] == "debug"
    assert record["code"] == 1000
    assert record["variants"] == ["A", "B"]
    assert record["logger"] == "bizerror.taxonomy"
    assert "timestamp" in record


def test_console_renderer_without_colors() -> None:
    buf = io.StringIO()

    with scoped_logging(ConsoleRenderer(output=buf, colors=False, show_timestamp=False)):
        get_logger("app").debug("duplicate code", code=500, taxonomy="Legacy")

    assert buf.getvalue().strip() == '[debug] duplicate code code=500 logger="app" taxonomy="Legacy"'


def test_configure_logging_formats() -> None:
    def run(fmt: str) -> object:
        return configure_logging(fmt, level="DEBUG", output=io.StringIO())

    assert isinstance(contextvars.copy_context().run(run, "json"), JsonRenderer)
    assert isinstance(contextvars.copy_context().run(run, "console"), ConsoleRenderer)
    assert isinstance(contextvars.copy_context().run(run, "none"), NoOpRenderer)
    with pytest.raises(ValueError, match="Unknown format"):
        contextvars.copy_context().run(run, "xml")


def test_configure_from_settings() -> None:
    settings = LoggingSettings(level="error", format="none")
    renderer = contextvars.copy_context().run(configure_from_settings, settings)

    assert isinstance(renderer, NoOpRenderer)
