"""Google Cloud plugin: exports Genkit telemetry and logs to a Cloud project."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from obs.gcp_logger import GcpLogger
from obs.otel.bootstrap import GcpOpenTelemetry
from obs.otel.config_resolution import TelemetryOverridesInput, resolve_telemetry_config
from obs.otel.config_types import GcpPluginConfig
from plugins.auth import credentials_from_info, load_credentials, resolve_project_id
from plugins.registry import Named, PluginProvider, TelemetryProvider, genkit_plugin

GOOGLE_CLOUD_PLUGIN_NAME = "googleCloud"


@dataclass(frozen=True)
class GcpPluginOptions:
    """Caller options for the Google Cloud plugin.

    ``project_id`` falls back to ``GCLOUD_PROJECT`` and then to the project of
    the discovered credentials. ``credentials`` is a service-account key used
    for export when the environment provides none.
    """

    project_id: str | None = None
    telemetry_config: TelemetryOverridesInput = None
    credentials: Mapping[str, object] | None = None


def telemetry_provider(plugin_id: str, config: GcpPluginConfig) -> TelemetryProvider:
    """Pair the telemetry and logging components for a plugin config.

    Returns
    -------
    TelemetryProvider
        Instrumentation and logger registered under ``plugin_id``.
    """
    return TelemetryProvider(
        instrumentation=Named(id=plugin_id, value=GcpOpenTelemetry(config)),
        logger=Named(id=plugin_id, value=GcpLogger(config)),
    )


def _initialize(options: GcpPluginOptions | None = None) -> PluginProvider:
    resolved = options or GcpPluginOptions()
    auth = load_credentials()
    credentials = (
        credentials_from_info(resolved.credentials)
        if resolved.credentials is not None
        else auth.credentials
    )
    config = GcpPluginConfig(
        telemetry_config=resolve_telemetry_config(overrides=resolved.telemetry_config),
        project_id=resolve_project_id(resolved.project_id, auth),
        credentials=credentials,
    )
    return PluginProvider(telemetry=telemetry_provider(GOOGLE_CLOUD_PLUGIN_NAME, config))


google_cloud = genkit_plugin(GOOGLE_CLOUD_PLUGIN_NAME, _initialize)


__all__ = [
    "GOOGLE_CLOUD_PLUGIN_NAME",
    "GcpPluginOptions",
    "google_cloud",
    "telemetry_provider",
]
