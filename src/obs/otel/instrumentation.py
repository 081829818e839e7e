"""Selection and installation of OpenTelemetry library instrumentations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from importlib.metadata import EntryPoint, entry_points
from typing import TYPE_CHECKING, cast

from opentelemetry.instrumentation.dependencies import get_dist_dependency_conflicts
from opentelemetry.instrumentation.instrumentor import BaseInstrumentor

from obs.otel.config_types import InstrumentationOptions, Instrumentor

if TYPE_CHECKING:
    from obs.otel.config_types import TelemetryConfig

_LOGGER = logging.getLogger(__name__)

INSTRUMENTOR_ENTRY_POINT_GROUP = "opentelemetry_instrumentor"


@dataclass(frozen=True)
class NamedInstrumentor:
    """Instrumentor paired with its name and install options."""

    name: str | None
    instrumentor: Instrumentor
    options: Mapping[str, object] = field(default_factory=dict)


def _entry_points(group: str) -> list[EntryPoint]:
    eps = entry_points()
    if hasattr(eps, "select"):
        return list(eps.select(group=group))
    getter = getattr(eps, "get", None)
    if callable(getter):
        return list(cast("Iterable[EntryPoint]", getter(group, ())))
    return []


def instrumentation_enabled(name: str, config: InstrumentationOptions) -> bool:
    """Return whether an instrumentation is enabled by its options.

    Instrumentations without options are enabled.
    """
    options = config.get(name)
    if options is None:
        return True
    return bool(options.get("enabled", True))


def instrumentation_kwargs(name: str | None, config: InstrumentationOptions) -> dict[str, object]:
    """Return ``instrument()`` keyword arguments for an instrumentation.

    Returns
    -------
    dict[str, object]
        Options for the instrumentation without the ``enabled`` toggle.
    """
    if name is None:
        return {}
    options = config.get(name) or {}
    return {key: value for key, value in options.items() if key != "enabled"}


def _dependency_conflict(entry: EntryPoint) -> str | None:
    dist = getattr(entry, "dist", None)
    if dist is None:
        return None
    conflict = get_dist_dependency_conflicts(dist)
    return None if conflict is None else str(conflict)


def _load_instrumentor(entry: EntryPoint) -> BaseInstrumentor | None:
    conflict = _dependency_conflict(entry)
    if conflict is not None:
        _LOGGER.warning("Skipping instrumentor %s: %s", entry.name, conflict)
        return None
    try:
        factory = entry.load()
    except (ImportError, AttributeError) as exc:
        _LOGGER.warning("Failed to load instrumentor entrypoint %s: %s", entry.name, exc)
        return None
    try:
        instrumentor = factory()
    except (RuntimeError, TypeError, ValueError) as exc:
        _LOGGER.warning("Instrumentor factory %s failed: %s", entry.name, exc)
        return None
    if isinstance(instrumentor, BaseInstrumentor):
        return instrumentor
    _LOGGER.warning("Instrumentor entrypoint %s returned invalid type.", entry.name)
    return None


def discover_auto_instrumentations(
    config: InstrumentationOptions,
    *,
    eps: Sequence[EntryPoint] | None = None,
) -> list[NamedInstrumentor]:
    """Load installed instrumentors that the options leave enabled.

    Parameters
    ----------
    config
        Per-instrumentation options keyed by entry-point name.
    eps
        Entry points to consider; defaults to the installed
        ``opentelemetry_instrumentor`` group.

    Returns
    -------
    list[NamedInstrumentor]
        Loaded instrumentors in entry-point order.
    """
    candidates = eps if eps is not None else _entry_points(INSTRUMENTOR_ENTRY_POINT_GROUP)
    resolved: list[NamedInstrumentor] = []
    for entry in candidates:
        if not instrumentation_enabled(entry.name, config):
            _LOGGER.debug("Instrumentation %s disabled by configuration", entry.name)
            continue
        instrumentor = _load_instrumentor(entry)
        if instrumentor is None:
            continue
        resolved.append(
            NamedInstrumentor(
                name=entry.name,
                instrumentor=instrumentor,
                options=instrumentation_kwargs(entry.name, config),
            )
        )
    return resolved


def resolve_instrumentations(
    config: TelemetryConfig,
    *,
    eps: Sequence[EntryPoint] | None = None,
) -> list[NamedInstrumentor]:
    """Return automatic instrumentations followed by the explicit extras.

    Returns
    -------
    list[NamedInstrumentor]
        Instrumentations to install, in order.
    """
    resolved: list[NamedInstrumentor] = []
    if config.auto_instrumentation:
        resolved.extend(
            discover_auto_instrumentations(config.auto_instrumentation_config, eps=eps)
        )
    resolved.extend(
        NamedInstrumentor(name=None, instrumentor=item) for item in config.instrumentations
    )
    return resolved


def install_instrumentations(
    instrumentations: Iterable[NamedInstrumentor],
    **provider_kwargs: object,
) -> list[NamedInstrumentor]:
    """Install instrumentations, passing provider handles and per-name options.

    Returns
    -------
    list[NamedInstrumentor]
        Instrumentations that installed without error.
    """
    installed: list[NamedInstrumentor] = []
    for item in instrumentations:
        label = item.name or type(item.instrumentor).__name__
        try:
            item.instrumentor.instrument(**provider_kwargs, **item.options)
        except (RuntimeError, TypeError, ValueError) as exc:
            _LOGGER.warning("Instrumentation %s failed to install: %s", label, exc)
            continue
        installed.append(item)
    _LOGGER.info("Installed %d OpenTelemetry instrumentations", len(installed))
    return installed


__all__ = [
    "INSTRUMENTOR_ENTRY_POINT_GROUP",
    "NamedInstrumentor",
    "discover_auto_instrumentations",
    "install_instrumentations",
    "instrumentation_enabled",
    "instrumentation_kwargs",
    "resolve_instrumentations",
]
