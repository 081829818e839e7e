"""Firestore-backed persistence for Genkit traces."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import msgspec
from google.cloud import firestore

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

DEFAULT_TRACE_COLLECTION = "genkit-traces"
TRACE_COLLECTION_ENV = "GENKIT_TRACE_COLLECTION"


class InstrumentationLibrary(StructBaseCompat, frozen=True, rename="camel"):
    """Scope that produced a span."""

    name: str
    version: str | None = None
    schema_url: str | None = None


class SpanStatus(StructBaseCompat, frozen=True, rename="camel"):
    """Final status of a span."""

    code: int
    message: str | None = None


class SpanData(StructBaseCompat, frozen=True, rename="camel"):
    """A finished span; times are epoch milliseconds."""

    span_id: str
    trace_id: str
    start_time: float
    end_time: float
    display_name: str
    parent_span_id: str | None = None
    attributes: dict[str, Any] = {}
    instrumentation_library: InstrumentationLibrary | None = None
    span_kind: str | None = None
    same_process_as_parent_span: dict[str, bool] | None = None
    status: SpanStatus | None = None
    time_events: dict[str, Any] | None = None
    links: list[dict[str, Any]] | None = None


class TraceData(StructBaseCompat, frozen=True, rename="camel"):
    """A trace and the spans recorded for it so far, keyed by span id."""

    trace_id: str
    start_time: float
    display_name: str | None = None
    end_time: float | None = None
    spans: dict[str, SpanData] = {}


class TraceQueryResponse(msgspec.Struct, frozen=True, kw_only=True):
    """One page of traces, newest first."""

    traces: list[TraceData]
    continuation_token: str | None = None


class FirestoreTraceStore:
    """Stores traces as documents keyed by trace id.

    Spans arrive in batches as they finish, so saves merge into the existing
    document instead of replacing it.
    """

    def __init__(
        self,
        options: FirestoreStoreOptions | None = None,
        *,
        client: Client | None = None,
    ) -> None:
        resolved = options or FirestoreStoreOptions()
        self._collection = resolve_collection(
            resolved.collection,
            TRACE_COLLECTION_ENV,
            DEFAULT_TRACE_COLLECTION,
        )
        self._client = client if client is not None else firestore_client(resolved)

    @property
    def collection(self) -> str:
        """Return the collection holding traces."""
        return self._collection

    def _documents(self) -> CollectionReference:
        return self._client.collection(self._collection)

    def save(self, trace_id: str, trace: TraceData) -> None:
        """Merge a trace and its spans into the stored document."""
        _LOGGER.debug(
            "Saving %d spans of trace %s to %s",
            len(trace.spans),
            trace_id,
            self._collection,
        )
        self._documents().document(trace_id).set(encode_document(trace), merge=True)

    def load(self, trace_id: str) -> TraceData | None:
        """Return the stored trace, or None when unknown.

        Raises
        ------
        ValueError
            Raised when the stored document is not a valid trace.
        """
        snapshot = self._documents().document(trace_id).get()
        if not snapshot.exists:
            return None
        return decode_document(snapshot.to_dict(), target_type=TraceData, document_id=trace_id)

    def list(
        self,
        limit: int | None = None,
        continuation_token: str | None = None,
    ) -> TraceQueryResponse:
        """Return a page of traces ordered by start time, newest first.

        Parameters
        ----------
        limit
            Page size; defaults to 10.
        continuation_token
            Id of the last trace returned by the previous page.

        Returns
        -------
        TraceQueryResponse
            Traces and a token for the next page when this one was full.

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
        traces, last_id = decode_snapshots(
            query.limit(page_size).stream(),
            target_type=TraceData,
        )
        return TraceQueryResponse(
            traces=traces,
            continuation_token=last_id if len(traces) == page_size else None,
        )


__all__ = [
    "DEFAULT_TRACE_COLLECTION",
    "TRACE_COLLECTION_ENV",
    "FirestoreTraceStore",
    "InstrumentationLibrary",
    "SpanData",
    "SpanStatus",
    "TraceData",
    "TraceQueryResponse",
]
