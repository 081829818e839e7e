"""Tests for Google Cloud OpenTelemetry provider wiring."""

from __future__ import annotations

import io

import pytest
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    InMemoryMetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_OFF

from obs.otel import bootstrap as otel_bootstrap
from obs.otel.config_resolution import development_defaults, production_defaults
from obs.otel.config_types import GcpPluginConfig


class RecordingInstrumentor:
    """Instrumentor that records install keyword arguments."""

    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    def instrument(self, **kwargs: object) -> None:
        """Record an install."""
        self.calls.append(kwargs)


def _local_telemetry(
    local_span_exporter: SpanExporter | None = None,
    **overrides: object,
) -> otel_bootstrap.GcpOpenTelemetry:
    config = development_defaults({"auto_instrumentation": False, **overrides})
    return otel_bootstrap.GcpOpenTelemetry(
        GcpPluginConfig(telemetry_config=config, project_id="test-project"),
        local_span_exporter=local_span_exporter,
    )


def test_export_gates_follow_config() -> None:
    """Ensure each signal exports only when export is on and it is not disabled."""
    local = _local_telemetry()
    assert not local.should_export_traces()
    assert not local.should_export_metrics()
    exporting = otel_bootstrap.GcpOpenTelemetry(
        GcpPluginConfig(
            telemetry_config=production_defaults({"disable_metrics": True}),
            project_id="test-project",
        )
    )
    assert exporting.should_export_traces()
    assert not exporting.should_export_metrics()


def test_local_runs_print_spans() -> None:
    """Ensure non-exporting configs print spans instead of retaining them."""
    telemetry = _local_telemetry()
    exporter = telemetry.create_span_exporter()
    assert isinstance(exporter, ConsoleSpanExporter)
    assert isinstance(telemetry.create_span_processor(exporter), SimpleSpanProcessor)
    assert isinstance(telemetry.create_metric_reader(), InMemoryMetricReader)


def test_configure_records_spans_locally() -> None:
    """Ensure configured providers send spans to a supplied local exporter."""
    recorder = InMemorySpanExporter()
    telemetry = _local_telemetry(recorder)
    providers = telemetry.configure(activate_global=False)
    try:
        tracer = providers.tracer_provider.get_tracer("genkit.tests")
        with tracer.start_as_current_span("flow"):
            pass
        assert providers.span_exporter is recorder
        spans = recorder.get_finished_spans()
        assert [span.name for span in spans] == ["flow"]
        attributes = providers.resource.attributes
        assert attributes["service.name"] == "genkit"
        assert attributes["cloud.account.id"] == "test-project"
        assert attributes["deployment.environment.name"] == "prod"
    finally:
        telemetry.shutdown()


def test_local_spans_written_not_retained() -> None:
    """Ensure local spans go to the console stream as they finish."""
    stream = io.StringIO()
    telemetry = _local_telemetry(ConsoleSpanExporter(out=stream))
    providers = telemetry.configure(activate_global=False)
    try:
        tracer = providers.tracer_provider.get_tracer("genkit.tests")
        with tracer.start_as_current_span("generate"):
            pass
        assert '"name": "generate"' in stream.getvalue()
    finally:
        telemetry.shutdown()


def test_configure_is_idempotent() -> None:
    """Ensure repeated configure calls reuse the providers."""
    telemetry = _local_telemetry()
    first = telemetry.configure(activate_global=False)
    try:
        assert telemetry.configure(activate_global=False) is first
    finally:
        telemetry.shutdown()


def test_configure_uses_sampler_and_installs_instrumentations() -> None:
    """Ensure the sampler is applied and instrumentations get the providers."""
    recorder = RecordingInstrumentor()
    telemetry = _local_telemetry(sampler=ALWAYS_OFF, instrumentations=[recorder])
    providers = telemetry.configure(activate_global=False)
    try:
        assert providers.tracer_provider.sampler is ALWAYS_OFF
        assert len(recorder.calls) == 1
        call = recorder.calls[0]
        assert call["tracer_provider"] is providers.tracer_provider
        assert call["meter_provider"] is providers.meter_provider
    finally:
        telemetry.shutdown()


def test_service_name_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure OTEL_SERVICE_NAME renames the service resource."""
    monkeypatch.setenv("OTEL_SERVICE_NAME", "checkout")
    resource = _local_telemetry().build_resource()
    assert resource.attributes["service.name"] == "checkout"


def test_exporting_config_builds_cloud_exporters(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure exporting configs wire the Cloud Trace and Monitoring exporters."""
    span_exporter = InMemorySpanExporter()
    seen: dict[str, object] = {}

    def _fake_span_exporter(project_id: str | None, credentials: object) -> InMemorySpanExporter:
        seen["trace_project"] = project_id
        seen["trace_credentials"] = credentials
        return span_exporter

    def _fake_metric_exporter(
        project_id: str | None,
        credentials: object,
    ) -> ConsoleMetricExporter:
        del credentials
        seen["metric_project"] = project_id
        return ConsoleMetricExporter()

    monkeypatch.setattr(otel_bootstrap, "_build_span_exporter", _fake_span_exporter)
    monkeypatch.setattr(otel_bootstrap, "_build_metric_exporter", _fake_metric_exporter)
    telemetry = otel_bootstrap.GcpOpenTelemetry(
        GcpPluginConfig(
            telemetry_config=production_defaults({"auto_instrumentation": False}),
            project_id="test-project",
        )
    )
    exporter = telemetry.create_span_exporter()
    assert exporter is span_exporter
    processor = telemetry.create_span_processor(exporter)
    try:
        assert isinstance(processor, BatchSpanProcessor)
    finally:
        processor.shutdown()
    reader = telemetry.create_metric_reader()
    try:
        assert isinstance(reader, PeriodicExportingMetricReader)
    finally:
        reader.shutdown()
    assert seen == {
        "trace_project": "test-project",
        "trace_credentials": None,
        "metric_project": "test-project",
    }
