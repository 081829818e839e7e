"""Telemetry configuration resolution helpers.

Each environment has a fixed default record. Caller overrides are laid over it
one field at a time: a present override replaces the default for that field,
an absent one (``msgspec.UNSET`` or ``None``) leaves it alone. Nested mappings
are replaced wholesale, never merged.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, cast

from obs.otel.config_types import (
    InstrumentationOptions,
    Instrumentor,
    TelemetryConfig,
    TelemetryConfigOverrides,
)
from obs.otel.environment import GenkitEnvironment, current_environment, parse_environment
from obs.otel.sampling import DEFAULT_SAMPLER, coerce_sampler
from serde_msgspec import coalesce_unset_or_none, is_unset, present_fields, struct_field_names

if TYPE_CHECKING:
    from opentelemetry.sdk.trace.sampling import Sampler

type TelemetryOverridesInput = TelemetryConfigOverrides | Mapping[str, object] | None

DEV_METRIC_EXPORT_INTERVAL_MS = 5_000
DEV_METRIC_EXPORT_TIMEOUT_MS = 5_000
PROD_METRIC_EXPORT_INTERVAL_MS = 300_000
PROD_METRIC_EXPORT_TIMEOUT_MS = 300_000

# Instrumentations that produce a span per low-level socket call.
NOISY_INSTRUMENTATIONS = ("urllib", "urllib3")

_OVERRIDE_ALIASES = {
    "autoInstrumentation": "auto_instrumentation",
    "autoInstrumentationConfig": "auto_instrumentation_config",
    "metricExportIntervalMillis": "metric_export_interval_ms",
    "metricExportTimeoutMillis": "metric_export_timeout_ms",
    "disableMetrics": "disable_metrics",
    "disableTraces": "disable_traces",
    "forceDevExport": "force_dev_export",
}


def default_auto_instrumentation_config() -> dict[str, dict[str, object]]:
    """Return the default per-instrumentation options.

    Returns
    -------
    dict[str, dict[str, object]]
        Options disabling noisy instrumentations.
    """
    return {name: {"enabled": False} for name in NOISY_INSTRUMENTATIONS}


def overlay_fields(
    base: Mapping[str, object],
    overrides: Mapping[str, object],
) -> dict[str, object]:
    """Lay present override values over a base record, one field deep.

    Parameters
    ----------
    base
        Complete default record.
    overrides
        Partial record; UNSET and None values count as absent.

    Returns
    -------
    dict[str, object]
        New record with overrides applied.
    """
    merged = dict(base)
    for name, value in overrides.items():
        if value is None or is_unset(value):
            continue
        merged[name] = value
    return merged


def split_overrides(
    overrides: TelemetryOverridesInput,
) -> tuple[TelemetryConfigOverrides, dict[str, object]]:
    """Split caller overrides into the typed record and unrecognized fields.

    Mapping keys may use snake_case field names or the camelCase option names
    Genkit plugins accept. Unknown keys are kept as-is.

    Returns
    -------
    tuple[TelemetryConfigOverrides, dict[str, object]]
        Typed overrides and leftover fields.
    """
    if overrides is None:
        return TelemetryConfigOverrides(), {}
    if isinstance(overrides, TelemetryConfigOverrides):
        return overrides, {}
    known_names = set(struct_field_names(TelemetryConfigOverrides))
    known: dict[str, Any] = {}
    extras: dict[str, object] = {}
    for key, value in overrides.items():
        name = _OVERRIDE_ALIASES.get(key, key)
        if name in known_names:
            known[name] = value
        elif value is not None and not is_unset(value):
            extras[key] = value
    return TelemetryConfigOverrides(**known), extras


def _development_defaults(overrides: TelemetryConfigOverrides) -> dict[str, object]:
    return {
        "sampler": DEFAULT_SAMPLER,
        "auto_instrumentation": True,
        "auto_instrumentation_config": default_auto_instrumentation_config(),
        "instrumentations": (),
        "metric_export_interval_ms": DEV_METRIC_EXPORT_INTERVAL_MS,
        "metric_export_timeout_ms": DEV_METRIC_EXPORT_TIMEOUT_MS,
        "disable_metrics": False,
        "disable_traces": False,
        # Local runs stay local unless the caller opts in.
        "export": bool(coalesce_unset_or_none(overrides.force_dev_export, False)),
    }


def _production_defaults() -> dict[str, object]:
    return {
        "sampler": DEFAULT_SAMPLER,
        "auto_instrumentation": True,
        "auto_instrumentation_config": default_auto_instrumentation_config(),
        "instrumentations": (),
        "metric_export_interval_ms": PROD_METRIC_EXPORT_INTERVAL_MS,
        "metric_export_timeout_ms": PROD_METRIC_EXPORT_TIMEOUT_MS,
        "disable_metrics": False,
        "disable_traces": False,
        "export": True,
    }


def _build_telemetry_config(
    defaults: Mapping[str, object],
    overrides: TelemetryConfigOverrides,
    extras: Mapping[str, object],
) -> TelemetryConfig:
    present = present_fields(overrides)
    present.pop("force_dev_export", None)
    payload = overlay_fields(defaults, present)
    return TelemetryConfig(
        sampler=coerce_sampler(cast("Sampler | str", payload["sampler"])),
        auto_instrumentation=cast("bool", payload["auto_instrumentation"]),
        auto_instrumentation_config=cast(
            "InstrumentationOptions", payload["auto_instrumentation_config"]
        ),
        instrumentations=tuple(cast("Sequence[Instrumentor]", payload["instrumentations"])),
        metric_export_interval_ms=cast("int", payload["metric_export_interval_ms"]),
        metric_export_timeout_ms=cast("int", payload["metric_export_timeout_ms"]),
        disable_metrics=cast("bool", payload["disable_metrics"]),
        disable_traces=cast("bool", payload["disable_traces"]),
        export=cast("bool", payload["export"]),
        extras=dict(extras),
    )


def development_defaults(overrides: TelemetryOverridesInput = None) -> TelemetryConfig:
    """Resolve telemetry config for local development runs.

    Metrics flush every five seconds and nothing is exported unless
    ``force_dev_export`` is set.

    Returns
    -------
    TelemetryConfig
        Fully populated telemetry configuration.
    """
    typed, extras = split_overrides(overrides)
    return _build_telemetry_config(_development_defaults(typed), typed, extras)


def production_defaults(overrides: TelemetryOverridesInput = None) -> TelemetryConfig:
    """Resolve telemetry config for deployed runs.

    Metrics flush every five minutes and telemetry is exported.

    Returns
    -------
    TelemetryConfig
        Fully populated telemetry configuration.
    """
    typed, extras = split_overrides(overrides)
    return _build_telemetry_config(_production_defaults(), typed, extras)


def resolve_telemetry_config(
    environment: GenkitEnvironment | str | None = None,
    overrides: TelemetryOverridesInput = None,
) -> TelemetryConfig:
    """Resolve telemetry config for an environment, applying caller overrides.

    Parameters
    ----------
    environment
        Target environment. When omitted it is read from ``GENKIT_ENV``.
    overrides
        Optional partial overrides.

    Returns
    -------
    TelemetryConfig
        Fully populated telemetry configuration.
    """
    resolved = current_environment() if environment is None else parse_environment(environment)
    if resolved is GenkitEnvironment.DEV:
        return development_defaults(overrides)
    return production_defaults(overrides)


__all__ = [
    "DEV_METRIC_EXPORT_INTERVAL_MS",
    "DEV_METRIC_EXPORT_TIMEOUT_MS",
    "NOISY_INSTRUMENTATIONS",
    "PROD_METRIC_EXPORT_INTERVAL_MS",
    "PROD_METRIC_EXPORT_TIMEOUT_MS",
    "TelemetryOverridesInput",
    "default_auto_instrumentation_config",
    "development_defaults",
    "overlay_fields",
    "production_defaults",
    "resolve_telemetry_config",
    "split_overrides",
]
