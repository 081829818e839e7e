"""Plugin contract: what a plugin hands back to the Genkit host."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from obs.gcp_logger import GcpLogger
    from obs.otel.bootstrap import GcpOpenTelemetry
    from storage.flow_state_store import FirestoreStateStore
    from storage.trace_store import FirestoreTraceStore

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Named[T]:
    """A provided value together with the id the host registers it under."""

    id: str
    value: T


@dataclass(frozen=True)
class TelemetryProvider:
    """Telemetry components contributed by a plugin."""

    instrumentation: Named[GcpOpenTelemetry]
    logger: Named[GcpLogger]


@dataclass(frozen=True)
class PluginProvider:
    """Everything a plugin contributes; absent entries are None."""

    telemetry: TelemetryProvider | None = None
    flow_state_store: Named[FirestoreStateStore] | None = None
    trace_store: Named[FirestoreTraceStore] | None = None


type PluginInitializer = Callable[..., PluginProvider]


@dataclass(frozen=True)
class Plugin:
    """A named plugin whose initializer builds its provider."""

    name: str
    initializer: PluginInitializer

    def initialize(self, *args: object, **kwargs: object) -> PluginProvider:
        """Run the initializer with caller options.

        Returns
        -------
        PluginProvider
            Components contributed by the plugin.
        """
        _LOGGER.debug("Initializing plugin %s", self.name)
        return self.initializer(*args, **kwargs)


def genkit_plugin(name: str, initializer: PluginInitializer) -> Plugin:
    """Declare a plugin.

    Returns
    -------
    Plugin
        Plugin wrapping the initializer.
    """
    return Plugin(name=name, initializer=initializer)


__all__ = [
    "Named",
    "Plugin",
    "PluginInitializer",
    "PluginProvider",
    "TelemetryProvider",
    "genkit_plugin",
]
