"""Firestore-backed persistence for flow execution state."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import msgspec
from google.cloud import firestore

from core_types import JsonValueLax
from serde_msgspec import StructBaseCompat
from storage.firestore import (
    FirestoreStoreOptions,
    decode_document,
    decode_snapshots,
    encode_document,
    firestore_client,
    resolve_collection,
    resolve_cursor,
    resolve_page_size,
)

if TYPE_CHECKING:
    from google.cloud.firestore import Client, CollectionReference

_LOGGER = logging.getLogger(__name__)

DEFAULT_FLOW_STATE_COLLECTION = "genkit-flows"
FLOW_STATE_COLLECTION_ENV = "GENKIT_FLOW_STATE_COLLECTION"


class FlowResult(StructBaseCompat, frozen=True, rename="camel"):
    """Outcome of a finished flow operation."""

    response: JsonValueLax = None
    error: str | None = None
    stacktrace: str | None = None


class FlowOperation(StructBaseCompat, frozen=True, rename="camel"):
    """Long-running operation handle for a flow."""

    name: str
    done: bool = False
    metadata: JsonValueLax = None
    result: FlowResult | None = None
    blocked_on_step: dict[str, Any] | None = None


class FlowExecution(StructBaseCompat, frozen=True, rename="camel"):
    """A single (re)execution of a flow."""

    start_time: float
    end_time: float | None = None
    trace_ids: list[str] = []


class FlowState(StructBaseCompat, frozen=True, rename="camel"):
    """Persisted state of a flow; ``start_time`` is epoch milliseconds."""

    flow_id: str
    start_time: float
    name: str | None = None
    input: JsonValueLax = None
    cache: dict[str, Any] = {}
    events_triggered: dict[str, Any] = {}
    blocked_on_step: dict[str, Any] | None = None
    operation: FlowOperation | None = None
    trace_context: str | None = None
    executions: list[FlowExecution] = []


class FlowStateQueryResponse(msgspec.Struct, frozen=True, kw_only=True):
    """One page of flow states, newest first."""

    flow_states: list[FlowState]
    continuation_token: str | None = None


class FirestoreStateStore:
    """Stores flow states as documents keyed by flow id."""

    def __init__(
        self,
        options: FirestoreStoreOptions | None = None,
        *,
        client: Client | None = None,
    ) -> None:
        resolved = options or FirestoreStoreOptions()
        self._collection = resolve_collection(
            resolved.collection,
            FLOW_STATE_COLLECTION_ENV,
            DEFAULT_FLOW_STATE_COLLECTION,
        )
        self._client = client if client is not None else firestore_client(resolved)

    @property
    def collection(self) -> str:
        """Return the collection holding flow states."""
        return self._collection

    def _documents(self) -> CollectionReference:
        return self._client.collection(self._collection)

    def save(self, flow_id: str, state: FlowState) -> None:
        """Write the full state for a flow, replacing any earlier version."""
        _LOGGER.debug("Saving flow state %s to %s", flow_id, self._collection)
        self._documents().document(flow_id).set(encode_document(state))

    def load(self, flow_id: str) -> FlowState | None:
        """Return the stored state for a flow, or None when unknown.

        Raises
        ------
        ValueError
            Raised when the stored document is not a valid flow state.
        """
        snapshot = self._documents().document(flow_id).get()
        if not snapshot.exists:
            return None
        return decode_document(snapshot.to_dict(), target_type=FlowState, document_id=flow_id)

    def list(
        self,
        limit: int | None = None,
        continuation_token: str | None = None,
    ) -> FlowStateQueryResponse:
        """Return a page of flow states ordered by start time, newest first.

        Parameters
        ----------
        limit
            Page size; defaults to 10.
        continuation_token
            Id of the last flow returned by the previous page.

        Returns
        -------
        FlowStateQueryResponse
            Flow states and a token for the next page when this one was full.

        Raises
        ------
        ValueError
            Raised when the limit is not positive or the token names no document.
        """
        page_size = resolve_page_size(limit)
        documents = self._documents()
        query = documents.order_by("startTime", direction=firestore.Query.DESCENDING)
        if continuation_token:
            query = query.start_after(resolve_cursor(documents, continuation_token))
        states, last_id = decode_snapshots(
            query.limit(page_size).stream(),
            target_type=FlowState,
        )
        return FlowStateQueryResponse(
            flow_states=states,
            continuation_token=last_id if len(states) == page_size else None,
        )


__all__ = [
    "DEFAULT_FLOW_STATE_COLLECTION",
    "FLOW_STATE_COLLECTION_ENV",
    "FirestoreStateStore",
    "FlowExecution",
    "FlowOperation",
    "FlowResult",
    "FlowState",
    "FlowStateQueryResponse",
]
