"""Observability for the Genkit Google Cloud plugins: telemetry and logging."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from obs.gcp_logger import GcpLogger, add_transport_stream_for_testing

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "GcpLogger": ("obs.gcp_logger", "GcpLogger"),
    "add_transport_stream_for_testing": ("obs.gcp_logger", "add_transport_stream_for_testing"),
}


def __getattr__(name: str) -> object:
    target = _EXPORT_MAP.get(name)
    if target is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    module_name, attr_name = target
    module = importlib.import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


__all__ = ["GcpLogger", "add_transport_stream_for_testing"]
