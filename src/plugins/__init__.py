"""Genkit plugins for Google Cloud and Firebase.

The plugins are exported as ``google_cloud_plugin`` and ``firebase_plugin`` so the
names do not shadow the ``plugins.google_cloud`` and ``plugins.firebase`` modules.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plugins.firebase import FirebasePluginParams, StoreLocation
    from plugins.firebase import firebase as firebase_plugin
    from plugins.google_cloud import GcpPluginOptions
    from plugins.google_cloud import google_cloud as google_cloud_plugin
    from plugins.registry import Named, Plugin, PluginProvider, TelemetryProvider, genkit_plugin

__all__ = [
    "FirebasePluginParams",
    "GcpPluginOptions",
    "Named",
    "Plugin",
    "PluginProvider",
    "StoreLocation",
    "TelemetryProvider",
    "firebase_plugin",
    "genkit_plugin",
    "google_cloud_plugin",
]

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "FirebasePluginParams": ("plugins.firebase", "FirebasePluginParams"),
    "StoreLocation": ("plugins.firebase", "StoreLocation"),
    "firebase_plugin": ("plugins.firebase", "firebase"),
    "GcpPluginOptions": ("plugins.google_cloud", "GcpPluginOptions"),
    "google_cloud_plugin": ("plugins.google_cloud", "google_cloud"),
    "Named": ("plugins.registry", "Named"),
    "Plugin": ("plugins.registry", "Plugin"),
    "PluginProvider": ("plugins.registry", "PluginProvider"),
    "TelemetryProvider": ("plugins.registry", "TelemetryProvider"),
    "genkit_plugin": ("plugins.registry", "genkit_plugin"),
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
