"""Tests for the Genkit console and Cloud Logging logger."""

from __future__ import annotations

import io
import json
import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider

from obs import gcp_logger
from obs.otel.config_resolution import development_defaults, production_defaults
from obs.otel.config_types import GcpPluginConfig


def _logger_for(*, export: bool, project_id: str | None = "test-project") -> gcp_logger.GcpLogger:
    telemetry = production_defaults() if export else development_defaults()
    return gcp_logger.GcpLogger(GcpPluginConfig(telemetry_config=telemetry, project_id=project_id))


def test_console_format_uses_lowercase_level() -> None:
    """Ensure local logs are written as ``[level] message``."""
    stream = io.StringIO()
    gcp_logger.add_transport_stream_for_testing(stream)
    logger = _logger_for(export=False).get_logger()
    logger.info("flow %s started", "menuSuggestion")
    logger.warning("slow step")
    assert stream.getvalue().splitlines() == [
        "[info] flow menuSuggestion started",
        "[warning] slow step",
    ]


def test_repeated_get_logger_replaces_handlers() -> None:
    """Ensure handlers are not stacked across get_logger calls."""
    stream = io.StringIO()
    gcp_logger.add_transport_stream_for_testing(stream)
    plugin_logger = _logger_for(export=False)
    plugin_logger.get_logger()
    logger = plugin_logger.get_logger()
    logger.info("once")
    assert stream.getvalue().splitlines() == ["[info] once"]


def test_testing_stream_only_affects_new_loggers() -> None:
    """Ensure the testing stream is attached when a logger is created."""
    logger = _logger_for(export=False).get_logger("dev")
    stream = io.StringIO()
    gcp_logger.add_transport_stream_for_testing(stream)
    logger.info("before")
    assert stream.getvalue() == ""
    _logger_for(export=False).get_logger("dev").info("after")
    assert stream.getvalue() == "[info] after\n"


def test_export_path_writes_json_to_cloud_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure exporting loggers send JSON through the Cloud Logging handler."""
    cloud_stream = io.StringIO()
    calls: list[tuple[str | None, object]] = []

    def _fake_cloud_handler(project_id: str | None, credentials: object) -> logging.Handler:
        calls.append((project_id, credentials))
        return logging.StreamHandler(cloud_stream)

    monkeypatch.setattr(gcp_logger, "_build_cloud_handler", _fake_cloud_handler)
    logger = _logger_for(export=True).get_logger()
    logger.error("step failed")
    payload = json.loads(cloud_stream.getvalue())
    assert calls == [("test-project", None)]
    assert payload["severity"] == "ERROR"
    assert payload["message"] == "step failed"
    assert payload["logger"] == "genkit"
    assert "trace_id" not in payload


def test_json_format_carries_trace_context(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure exported records are correlated with the active span."""
    stream = io.StringIO()
    monkeypatch.setattr(
        gcp_logger,
        "_build_cloud_handler",
        lambda project_id, credentials: logging.StreamHandler(stream),
    )
    logger = _logger_for(export=True).get_logger()
    tracer = TracerProvider().get_tracer("genkit.tests")
    with tracer.start_as_current_span("flow") as span:
        logger.info("inside span")
        context = span.get_span_context()
    payload = json.loads(stream.getvalue())
    trace_id = f"{context.trace_id:032x}"
    assert payload["trace_id"] == trace_id
    assert payload["span_id"] == f"{context.span_id:016x}"
    assert payload["logging.googleapis.com/trace"] == f"projects/test-project/traces/{trace_id}"
    assert payload["logging.googleapis.com/trace_sampled"] is True


def test_json_formatter_without_project_omits_cloud_keys() -> None:
    """Ensure Cloud Logging trace keys need a project."""
    formatter = gcp_logger.JsonLogFormatter(project_id=None)
    record = logging.LogRecord("genkit", logging.INFO, __file__, 1, "hello", None, None)
    record.trace_id = "0" * 31 + "1"
    record.span_id = "0" * 15 + "1"
    payload = json.loads(formatter.format(record))
    assert payload["trace_id"] == record.trace_id
    assert "logging.googleapis.com/trace" not in payload
