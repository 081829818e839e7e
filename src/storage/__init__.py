"""Firestore-backed flow state and trace stores."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storage.firestore import FirestoreStoreOptions
    from storage.flow_state_store import FirestoreStateStore, FlowState
    from storage.trace_store import FirestoreTraceStore, SpanData, TraceData

__all__ = (
    "FirestoreStateStore",
    "FirestoreStoreOptions",
    "FirestoreTraceStore",
    "FlowState",
    "SpanData",
    "TraceData",
)
_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "FirestoreStoreOptions": ("storage.firestore", "FirestoreStoreOptions"),
    "FirestoreStateStore": ("storage.flow_state_store", "FirestoreStateStore"),
    "FlowState": ("storage.flow_state_store", "FlowState"),
    "FirestoreTraceStore": ("storage.trace_store", "FirestoreTraceStore"),
    "SpanData": ("storage.trace_store", "SpanData"),
    "TraceData": ("storage.trace_store", "TraceData"),
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


def __dir__() -> list[str]:
    return sorted(__all__)
