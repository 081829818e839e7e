"""OpenTelemetry configuration for the Genkit Google Cloud plugins."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from obs.otel.bootstrap import GcpOpenTelemetry, TelemetryProviders
    from obs.otel.config_resolution import (
        development_defaults,
        production_defaults,
        resolve_telemetry_config,
    )
    from obs.otel.config_types import (
        GcpPluginConfig,
        TelemetryConfig,
        TelemetryConfigOverrides,
    )
    from obs.otel.environment import GenkitEnvironment, current_environment, is_dev_env
    from obs.otel.logging import TraceContextFilter

__all__ = [
    "GcpOpenTelemetry",
    "GcpPluginConfig",
    "GenkitEnvironment",
    "TelemetryConfig",
    "TelemetryConfigOverrides",
    "TelemetryProviders",
    "TraceContextFilter",
    "current_environment",
    "development_defaults",
    "is_dev_env",
    "production_defaults",
    "resolve_telemetry_config",
]

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "GcpOpenTelemetry": ("obs.otel.bootstrap", "GcpOpenTelemetry"),
    "TelemetryProviders": ("obs.otel.bootstrap", "TelemetryProviders"),
    "GcpPluginConfig": ("obs.otel.config_types", "GcpPluginConfig"),
    "TelemetryConfig": ("obs.otel.config_types", "TelemetryConfig"),
    "TelemetryConfigOverrides": ("obs.otel.config_types", "TelemetryConfigOverrides"),
    "development_defaults": ("obs.otel.config_resolution", "development_defaults"),
    "production_defaults": ("obs.otel.config_resolution", "production_defaults"),
    "resolve_telemetry_config": ("obs.otel.config_resolution", "resolve_telemetry_config"),
    "GenkitEnvironment": ("obs.otel.environment", "GenkitEnvironment"),
    "current_environment": ("obs.otel.environment", "current_environment"),
    "is_dev_env": ("obs.otel.environment", "is_dev_env"),
    "TraceContextFilter": ("obs.otel.logging", "TraceContextFilter"),
}


def __getattr__(name: str) -> object:
    export = _EXPORT_MAP.get(name)
    if export is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    module_name, attr_name = export
    module = importlib.import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(__all__)
