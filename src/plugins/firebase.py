"""Firebase plugin: Google Cloud telemetry plus Firestore flow and trace stores."""

from __future__ import annotations

from dataclasses import dataclass

from obs.otel.config_resolution import TelemetryOverridesInput, resolve_telemetry_config
from obs.otel.config_types import GcpPluginConfig
from plugins.auth import load_credentials, resolve_project_id
from plugins.google_cloud import telemetry_provider
from plugins.registry import Named, PluginProvider, genkit_plugin
from storage.firestore import FirestoreStoreOptions
from storage.flow_state_store import FirestoreStateStore
from storage.trace_store import FirestoreTraceStore

FIREBASE_PLUGIN_NAME = "firebase"
FIRESTORE_STORE_ID = "firestore"


@dataclass(frozen=True)
class StoreLocation:
    """Where a store keeps its documents; unset fields use the defaults."""

    collection: str | None = None
    database_id: str | None = None


@dataclass(frozen=True)
class FirebasePluginParams:
    """Caller options for the Firebase plugin."""

    project_id: str | None = None
    flow_state_store: StoreLocation | None = None
    trace_store: StoreLocation | None = None
    telemetry_config: TelemetryOverridesInput = None


def _store_options(
    base: FirestoreStoreOptions,
    location: StoreLocation | None,
) -> FirestoreStoreOptions:
    if location is None:
        return base
    return base.with_overrides(collection=location.collection, database_id=location.database_id)


def _initialize(params: FirebasePluginParams | None = None) -> PluginProvider:
    resolved = params or FirebasePluginParams()
    auth = load_credentials()
    project_id = resolve_project_id(resolved.project_id, auth)
    config = GcpPluginConfig(
        telemetry_config=resolve_telemetry_config(overrides=resolved.telemetry_config),
        project_id=project_id,
        credentials=auth.credentials,
    )
    base = FirestoreStoreOptions(project_id=project_id, credentials=auth.credentials)
    return PluginProvider(
        telemetry=telemetry_provider(FIREBASE_PLUGIN_NAME, config),
        flow_state_store=Named(
            id=FIRESTORE_STORE_ID,
            value=FirestoreStateStore(_store_options(base, resolved.flow_state_store)),
        ),
        trace_store=Named(
            id=FIRESTORE_STORE_ID,
            value=FirestoreTraceStore(_store_options(base, resolved.trace_store)),
        ),
    )


firebase = genkit_plugin(FIREBASE_PLUGIN_NAME, _initialize)


__all__ = [
    "FIREBASE_PLUGIN_NAME",
    "FIRESTORE_STORE_ID",
    "FirebasePluginParams",
    "StoreLocation",
    "firebase",
]
