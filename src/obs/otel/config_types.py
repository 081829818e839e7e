"""Telemetry configuration type definitions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import msgspec
from opentelemetry.sdk.trace.sampling import Sampler

from core.config_base import config_fingerprint, fingerprint_value, type_name
from serde_msgspec import StructBaseStrict

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

type InstrumentationOptions = Mapping[str, Mapping[str, object]]


@runtime_checkable
class Instrumentor(Protocol):
    """Anything that can install OpenTelemetry hooks into a library."""

    def instrument(self, **kwargs: object) -> None:
        """Install instrumentation."""
        ...


def _empty_mapping() -> Mapping[str, object]:
    return MappingProxyType({})


def freeze_instrumentation_options(options: InstrumentationOptions) -> InstrumentationOptions:
    """Return a read-only copy of per-instrumentation options.

    Returns
    -------
    InstrumentationOptions
        Mapping proxy over copied option mappings.
    """
    return MappingProxyType(
        {str(name): MappingProxyType(dict(values)) for name, values in options.items()}
    )


@dataclass(frozen=True)
class TelemetryConfig:
    """Resolved telemetry configuration shared by the logger and the exporters.

    ``export`` gates whether logs, traces and metrics leave the process.
    ``extras`` carries override fields this module does not know about.
    Mapping fields are copied into read-only views on construction.
    """

    sampler: Sampler
    auto_instrumentation: bool
    auto_instrumentation_config: InstrumentationOptions = field(hash=False)
    instrumentations: tuple[Instrumentor, ...]
    metric_export_interval_ms: int
    metric_export_timeout_ms: int
    disable_metrics: bool
    disable_traces: bool
    export: bool
    extras: Mapping[str, object] = field(default_factory=_empty_mapping, hash=False)

    def __post_init__(self) -> None:
        """Detach mapping fields from caller-owned dicts."""
        object.__setattr__(
            self,
            "auto_instrumentation_config",
            freeze_instrumentation_options(self.auto_instrumentation_config),
        )
        object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))
        object.__setattr__(self, "instrumentations", tuple(self.instrumentations))

    def fingerprint_payload(self) -> Mapping[str, object]:
        """Return canonical payload for fingerprinting."""
        return {
            "sampler": {
                "type": type_name(self.sampler),
                "description": self.sampler.get_description(),
            },
            "auto_instrumentation": self.auto_instrumentation,
            "auto_instrumentation_config": fingerprint_value(self.auto_instrumentation_config),
            "instrumentations": [type_name(item) for item in self.instrumentations],
            "metric_export_interval_ms": self.metric_export_interval_ms,
            "metric_export_timeout_ms": self.metric_export_timeout_ms,
            "disable_metrics": self.disable_metrics,
            "disable_traces": self.disable_traces,
            "export": self.export,
            "extras": fingerprint_value(self.extras),
        }

    def fingerprint(self) -> str:
        """Return a stable fingerprint for the config."""
        return config_fingerprint(self.fingerprint_payload())


class TelemetryConfigOverrides(StructBaseStrict, frozen=True):
    """Caller-supplied overrides; any field left UNSET keeps the environment default.

    ``sampler`` may be a ``Sampler`` or a sampler name such as ``always_on``.
    ``force_dev_export`` only affects the development default of ``export``.
    """

    sampler: Sampler | str | msgspec.UnsetType | None = msgspec.UNSET
    auto_instrumentation: bool | msgspec.UnsetType | None = msgspec.UNSET
    auto_instrumentation_config: InstrumentationOptions | msgspec.UnsetType | None = (
        msgspec.UNSET
    )
    instrumentations: Sequence[Instrumentor] | msgspec.UnsetType | None = msgspec.UNSET
    metric_export_interval_ms: int | msgspec.UnsetType | None = msgspec.UNSET
    metric_export_timeout_ms: int | msgspec.UnsetType | None = msgspec.UNSET
    disable_metrics: bool | msgspec.UnsetType | None = msgspec.UNSET
    disable_traces: bool | msgspec.UnsetType | None = msgspec.UNSET
    export: bool | msgspec.UnsetType | None = msgspec.UNSET
    force_dev_export: bool | msgspec.UnsetType | None = msgspec.UNSET


@dataclass(frozen=True)
class GcpPluginConfig:
    """Settings shared by the Google Cloud telemetry and logging components."""

    telemetry_config: TelemetryConfig
    project_id: str | None = None
    credentials: Credentials | None = None


__all__ = [
    "GcpPluginConfig",
    "InstrumentationOptions",
    "Instrumentor",
    "TelemetryConfig",
    "TelemetryConfigOverrides",
    "freeze_instrumentation_options",
]
