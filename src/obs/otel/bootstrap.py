"""Bootstrap OpenTelemetry providers that export to Google Cloud."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    InMemoryMetricReader,
    MetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from obs.otel.constants import GENKIT_METRIC_PREFIX
from obs.otel.environment import current_environment
from obs.otel.instrumentation import (
    NamedInstrumentor,
    install_instrumentations,
    resolve_instrumentations,
)
from obs.otel.resources import (
    ResourceOptions,
    build_resource,
    resolve_service_name,
    resolve_service_version,
)

if TYPE_CHECKING:
    from google.auth.credentials import Credentials
    from opentelemetry.sdk.resources import Resource

    from obs.otel.config_types import GcpPluginConfig, TelemetryConfig

_LOGGER = logging.getLogger(__name__)


def _build_span_exporter(project_id: str | None, credentials: Credentials | None) -> SpanExporter:
    from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter

    if credentials is None:
        return CloudTraceSpanExporter(project_id=project_id)
    from google.cloud.trace_v2 import TraceServiceClient

    return CloudTraceSpanExporter(
        project_id=project_id,
        client=TraceServiceClient(credentials=credentials),
    )


def _build_metric_exporter(
    project_id: str | None,
    credentials: Credentials | None,
) -> MetricExporter:
    from opentelemetry.exporter.cloud_monitoring import CloudMonitoringMetricsExporter

    if credentials is None:
        return CloudMonitoringMetricsExporter(project_id=project_id, prefix=GENKIT_METRIC_PREFIX)
    from google.cloud.monitoring_v3 import MetricServiceClient

    return CloudMonitoringMetricsExporter(
        project_id=project_id,
        client=MetricServiceClient(credentials=credentials),
        prefix=GENKIT_METRIC_PREFIX,
    )


@dataclass(frozen=True)
class TelemetryProviders:
    """Container for configured OpenTelemetry providers."""

    resource: Resource
    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    span_exporter: SpanExporter
    metric_reader: MetricReader
    instrumentations: tuple[NamedInstrumentor, ...] = ()

    def activate_global(self) -> None:
        """Activate providers as global defaults."""
        trace.set_tracer_provider(self.tracer_provider)
        metrics.set_meter_provider(self.meter_provider)

    def shutdown(self) -> None:
        """Shutdown all configured providers."""
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()


class GcpOpenTelemetry:
    """Builds tracer and meter providers from a resolved telemetry config.

    Exporting configs ship spans to Cloud Trace and metrics to Cloud
    Monitoring. Otherwise spans are written to the local span exporter
    (stdout unless one is supplied) and metrics stay in an on-demand reader,
    so nothing leaves the process.
    """

    def __init__(
        self,
        config: GcpPluginConfig,
        *,
        local_span_exporter: SpanExporter | None = None,
    ) -> None:
        self._config = config
        self._local_span_exporter = local_span_exporter
        self._providers: TelemetryProviders | None = None

    @property
    def config(self) -> GcpPluginConfig:
        """Return the plugin configuration."""
        return self._config

    @property
    def telemetry_config(self) -> TelemetryConfig:
        """Return the resolved telemetry configuration."""
        return self._config.telemetry_config

    def should_export_traces(self) -> bool:
        """Return True when spans are shipped to Cloud Trace."""
        return self.telemetry_config.export and not self.telemetry_config.disable_traces

    def should_export_metrics(self) -> bool:
        """Return True when metrics are shipped to Cloud Monitoring."""
        return self.telemetry_config.export and not self.telemetry_config.disable_metrics

    def build_resource(self) -> Resource:
        """Build the resource describing this process.

        Returns
        -------
        Resource
            Resource with service identity and project attributes.
        """
        return build_resource(
            resolve_service_name(),
            ResourceOptions(
                service_version=resolve_service_version(),
                environment=current_environment().value,
                project_id=self._config.project_id,
            ),
        )

    def create_span_exporter(self) -> SpanExporter:
        """Return the span exporter matching the export gate.

        Returns
        -------
        SpanExporter
            Cloud Trace exporter, or the local exporter for non-exporting runs.
        """
        if self.should_export_traces():
            return _build_span_exporter(self._config.project_id, self._config.credentials)
        if self._local_span_exporter is not None:
            return self._local_span_exporter
        return ConsoleSpanExporter()

    def create_span_processor(self, exporter: SpanExporter) -> SpanProcessor:
        """Wrap a span exporter in the processor used for it.

        Returns
        -------
        SpanProcessor
            Batching processor for remote export, simple processor otherwise.
        """
        if self.should_export_traces():
            return BatchSpanProcessor(exporter)
        return SimpleSpanProcessor(exporter)

    def create_metric_reader(self) -> MetricReader:
        """Return the metric reader matching the export gate.

        Returns
        -------
        MetricReader
            Periodic reader flushing to Cloud Monitoring, or an in-memory
            reader for local runs.
        """
        if not self.should_export_metrics():
            return InMemoryMetricReader()
        return PeriodicExportingMetricReader(
            _build_metric_exporter(self._config.project_id, self._config.credentials),
            export_interval_millis=self.telemetry_config.metric_export_interval_ms,
            export_timeout_millis=self.telemetry_config.metric_export_timeout_ms,
        )

    def get_instrumentations(self) -> list[NamedInstrumentor]:
        """Return automatic instrumentations followed by explicit ones.

        Returns
        -------
        list[NamedInstrumentor]
            Instrumentations to install.
        """
        return resolve_instrumentations(self.telemetry_config)

    def configure(self, *, activate_global: bool = True) -> TelemetryProviders:
        """Configure providers and install instrumentations once.

        Parameters
        ----------
        activate_global
            Whether to register the providers as OpenTelemetry globals.

        Returns
        -------
        TelemetryProviders
            Configured tracer and meter providers.
        """
        if self._providers is not None:
            return self._providers
        resource = self.build_resource()
        span_exporter = self.create_span_exporter()
        tracer_provider = TracerProvider(
            resource=resource,
            sampler=self.telemetry_config.sampler,
        )
        tracer_provider.add_span_processor(self.create_span_processor(span_exporter))
        metric_reader = self.create_metric_reader()
        meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
        installed = install_instrumentations(
            self.get_instrumentations(),
            tracer_provider=tracer_provider,
            meter_provider=meter_provider,
        )
        providers = TelemetryProviders(
            resource=resource,
            tracer_provider=tracer_provider,
            meter_provider=meter_provider,
            span_exporter=span_exporter,
            metric_reader=metric_reader,
            instrumentations=tuple(installed),
        )
        if activate_global:
            providers.activate_global()
        self._providers = providers
        _LOGGER.info(
            "OpenTelemetry configured for project %s (traces exported: %s, metrics exported: %s)",
            self._config.project_id,
            self.should_export_traces(),
            self.should_export_metrics(),
        )
        return providers

    def shutdown(self) -> None:
        """Flush and shut down configured providers."""
        if self._providers is None:
            return
        self._providers.shutdown()
        self._providers = None


__all__ = ["GcpOpenTelemetry", "TelemetryProviders"]
