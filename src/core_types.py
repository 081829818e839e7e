"""Shared type aliases and small typing helpers."""

from __future__ import annotations

from typing import Annotated, Any

from msgspec import Meta

COLLECTION_PATTERN = "^[^/]+$"

type JsonValueLax = Any

PositiveInt = Annotated[int, Meta(gt=0)]

CollectionStr = Annotated[
    str,
    Meta(
        pattern=COLLECTION_PATTERN,
        min_length=1,
        title="Collection",
        description="Top-level Firestore collection name.",
    ),
]


__all__ = [
    "COLLECTION_PATTERN",
    "CollectionStr",
    "JsonValueLax",
    "PositiveInt",
]
