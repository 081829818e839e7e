"""Firestore client construction and document codecs shared by the stores."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol

import msgspec

from core_types import CollectionStr, PositiveInt
from serde_msgspec import convert, to_builtins, validation_error_payload
from utils.env_utils import env_text

if TYPE_CHECKING:
    from google.auth.credentials import Credentials
    from google.cloud.firestore import Client

_LOGGER = logging.getLogger(__name__)

DEFAULT_DATABASE_ID = "(default)"
DEFAULT_PAGE_SIZE = 10


class DocumentSnapshot(Protocol):
    """The parts of a Firestore document snapshot the stores read."""

    @property
    def id(self) -> str:
        """Return the document id."""
        ...

    @property
    def exists(self) -> bool:
        """Return True when the document exists."""
        ...

    def to_dict(self) -> dict[str, Any] | None:
        """Return the document fields."""
        ...


@dataclass(frozen=True)
class FirestoreStoreOptions:
    """Connection settings for a Firestore-backed store."""

    project_id: str | None = None
    credentials: Credentials | None = None
    collection: str | None = None
    database_id: str | None = None

    def with_overrides(
        self,
        *,
        collection: str | None = None,
        database_id: str | None = None,
    ) -> FirestoreStoreOptions:
        """Return options with caller-supplied collection and database applied.

        Returns
        -------
        FirestoreStoreOptions
            Options where present overrides replace the current values.
        """
        return replace(
            self,
            collection=collection or self.collection,
            database_id=database_id or self.database_id,
        )


def firestore_client(options: FirestoreStoreOptions) -> Client:
    """Build a Firestore client for store options.

    Returns
    -------
    google.cloud.firestore.Client
        Client bound to the configured project and database.
    """
    from google.cloud import firestore

    return firestore.Client(
        project=options.project_id,
        credentials=options.credentials,
        database=options.database_id or DEFAULT_DATABASE_ID,
    )


def resolve_collection(explicit: str | None, env_var: str, default: str) -> str:
    """Return the collection name from options, the environment or a default.

    Returns
    -------
    str
        Validated top-level collection name.

    Raises
    ------
    ValueError
        Raised when the name is empty or contains a path separator.
    """
    name = explicit or env_text(env_var, default=default)
    try:
        return convert(name, target_type=CollectionStr)
    except msgspec.ValidationError as exc:
        details = validation_error_payload(exc)
        msg = f"Invalid Firestore collection {name!r}: {details.get('summary', exc)}"
        raise ValueError(msg) from exc


def resolve_page_size(limit: int | None) -> int:
    """Return a validated page size, defaulting when absent.

    Returns
    -------
    int
        Positive page size.

    Raises
    ------
    ValueError
        Raised when the limit is not a positive integer.
    """
    if limit is None:
        return DEFAULT_PAGE_SIZE
    try:
        return convert(limit, target_type=PositiveInt)
    except msgspec.ValidationError as exc:
        msg = f"List limit must be a positive integer, got {limit!r}"
        raise ValueError(msg) from exc


def resolve_cursor(documents: Any, continuation_token: str) -> DocumentSnapshot:
    """Return the snapshot a continuation token points at.

    Returns
    -------
    DocumentSnapshot
        Snapshot of the last document on the previous page.

    Raises
    ------
    ValueError
        Raised when no document has the token's id.
    """
    cursor = documents.document(continuation_token).get()
    if not cursor.exists:
        msg = f"Unknown continuation token {continuation_token!r}"
        raise ValueError(msg)
    return cursor


def encode_document(document: msgspec.Struct) -> dict[str, Any]:
    """Return the Firestore field mapping for a document struct.

    Returns
    -------
    dict[str, Any]
        Builtin mapping ready for ``DocumentReference.set``.
    """
    payload = to_builtins(document)
    if not isinstance(payload, dict):
        msg = f"Expected a mapping for {type(document).__name__}, got {type(payload).__name__}"
        raise TypeError(msg)
    return payload


def decode_document[T](
    payload: Mapping[str, Any] | None,
    *,
    target_type: type[T],
    document_id: str,
) -> T:
    """Decode stored document fields into a struct.

    Returns
    -------
    T
        Decoded document.

    Raises
    ------
    ValueError
        Raised when the stored fields do not match the document schema.
    """
    try:
        return convert(dict(payload or {}), target_type=target_type, strict=False)
    except msgspec.ValidationError as exc:
        details = validation_error_payload(exc)
        path = details.get("path")
        location = f" at {path}" if path else ""
        msg = (
            f"Stored document {document_id!r} is not a valid {target_type.__name__}"
            f"{location}: {details.get('summary', exc)}"
        )
        raise ValueError(msg) from exc


def decode_snapshots[T](
    snapshots: Iterable[DocumentSnapshot],
    *,
    target_type: type[T],
) -> tuple[list[T], str | None]:
    """Decode a page of snapshots and return it with the last document id.

    Returns
    -------
    tuple[list[T], str | None]
        Decoded documents and the id of the last one, if any.
    """
    decoded: list[T] = []
    last_id: str | None = None
    for snapshot in snapshots:
        decoded.append(
            decode_document(snapshot.to_dict(), target_type=target_type, document_id=snapshot.id)
        )
        last_id = snapshot.id
    _LOGGER.debug("Decoded %d %s documents", len(decoded), target_type.__name__)
    return decoded, last_id


__all__ = [
    "DEFAULT_DATABASE_ID",
    "DEFAULT_PAGE_SIZE",
    "DocumentSnapshot",
    "FirestoreStoreOptions",
    "decode_document",
    "decode_snapshots",
    "encode_document",
    "firestore_client",
    "resolve_collection",
    "resolve_cursor",
    "resolve_page_size",
]
