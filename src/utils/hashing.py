"""Explicit hash utilities with stable serialization semantics."""

from __future__ import annotations

import hashlib

from serde_msgspec import JSON_ENCODER, JSON_ENCODER_SORTED, to_builtins


def hash_sha256_hex(payload: bytes, *, length: int | None = None) -> str:
    """Return SHA-256 hex digest, optionally truncated.

    Parameters
    ----------
    payload
        Raw bytes to hash.
    length
        Optional length of hex digest to return.

    Returns:
    -------
    str
        Hex digest string (possibly truncated).
    """
    digest = hashlib.sha256(payload).hexdigest()
    return digest if length is None else digest[:length]


# -----------------------------------------------------------------------------
# Payload hashing (JSON via msgspec encoders)
# -----------------------------------------------------------------------------


def _json_hash(
    payload: object,
    *,
    str_keys: bool = False,
    sorted_keys: bool = False,
) -> str:
    buffer = bytearray()
    resolved = to_builtins(payload, str_keys=str_keys)
    if sorted_keys:
        JSON_ENCODER_SORTED.encode_into(resolved, buffer)
    else:
        JSON_ENCODER.encode_into(resolved, buffer)
    return hash_sha256_hex(bytes(buffer))


def hash_json_canonical(payload: object, *, str_keys: bool = False) -> str:
    """Return SHA-256 hexdigest using JSON_ENCODER_SORTED.

    Parameters
    ----------
    payload
        Payload to encode.
    str_keys
        Whether to coerce mapping keys to strings.

    Returns:
    -------
    str
        SHA-256 hexdigest.
    """
    return _json_hash(payload, str_keys=str_keys, sorted_keys=True)


__all__ = ["hash_json_canonical", "hash_sha256_hex"]
