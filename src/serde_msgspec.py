"""Shared msgspec policy and helpers."""

from __future__ import annotations

import re
from typing import Literal

import msgspec


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base struct for strict contracts."""


class StructBaseCompat(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=False,
):
    """Base struct for forward-compatible persisted documents."""


_DEFAULT_ORDER: Literal["deterministic"] = "deterministic"

_VALIDATION_RE = re.compile(r"^(?P<summary>.*?)(?:\s+-\s+at\s+`(?P<path>[^`]+)`)?$")


def _json_enc_hook(obj: object) -> object:
    if isinstance(obj, type):
        return f"{obj.__module__}.{obj.__qualname__}"
    if obj is msgspec.NODEFAULT:
        return "NODEFAULT"
    if isinstance(obj, msgspec.Raw):
        return bytes(obj).hex()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj).hex()
    if isinstance(obj, BaseException):
        return f"{obj.__class__.__name__}: {obj}"
    raise TypeError


JSON_ENCODER = msgspec.json.Encoder(
    enc_hook=_json_enc_hook,
    order=_DEFAULT_ORDER,
    decimal_format="string",
    uuid_format="canonical",
)
JSON_ENCODER_SORTED = msgspec.json.Encoder(
    enc_hook=_json_enc_hook,
    order="sorted",
    decimal_format="string",
    uuid_format="canonical",
)


def validation_error_payload(exc: msgspec.ValidationError) -> dict[str, str]:
    """Normalize a msgspec ValidationError for diagnostics.

    Parameters
    ----------
    exc
        ValidationError raised by msgspec decoding/conversion.

    Returns
    -------
    dict[str, str]
        Normalized error payload containing type, summary, and optional path.
    """
    message = str(exc).strip()
    match = _VALIDATION_RE.match(message)
    payload: dict[str, str] = {"type": exc.__class__.__name__}
    if match:
        summary = (match.group("summary") or "").strip()
        if summary:
            payload["summary"] = summary
        path = match.group("path")
        if path:
            payload["path"] = path
        return payload
    payload["summary"] = message
    return payload


def dumps_json(obj: object, *, pretty: bool = False) -> bytes:
    """Serialize an object to JSON bytes.

    Parameters
    ----------
    obj
        Object to serialize.
    pretty
        Whether to format with indentation.

    Returns
    -------
    bytes
        JSON payload.
    """
    raw = JSON_ENCODER.encode(obj)
    if not pretty:
        return raw
    return msgspec.json.format(raw, indent=2)


def convert[T](
    obj: object,
    *,
    target_type: type[T],
    strict: bool = True,
    from_attributes: bool = False,
) -> T:
    """Convert an object into a target type.

    Parameters
    ----------
    obj
        Object to convert.
    target_type
        Target type for conversion.
    strict
        Whether to enforce strict conversion.
    from_attributes
        Whether to read attributes from objects.

    Returns
    -------
    T
        Converted payload.
    """
    return msgspec.convert(
        obj,
        type=target_type,
        strict=strict,
        from_attributes=from_attributes,
    )


def to_builtins(obj: object, *, str_keys: bool = True) -> object:
    """Convert an object into builtin JSON-friendly types.

    Parameters
    ----------
    obj
        Object to convert.
    str_keys
        Whether to coerce mapping keys to strings.

    Returns
    -------
    object
        Builtin-friendly representation.
    """
    return msgspec.to_builtins(
        obj,
        order=_DEFAULT_ORDER,
        str_keys=str_keys,
        enc_hook=_json_enc_hook,
    )


def struct_field_names(struct: type[msgspec.Struct]) -> tuple[str, ...]:
    """Return declared field names for a msgspec struct type.

    Returns
    -------
    tuple[str, ...]
        Field names in declaration order.
    """
    return tuple(struct.__struct_fields__)


def present_fields(struct: msgspec.Struct) -> dict[str, object]:
    """Return the fields of a struct instance that carry a value.

    Fields holding ``msgspec.UNSET`` or ``None`` are treated as absent.

    Returns
    -------
    dict[str, object]
        Mapping of present field names to values.
    """
    values: dict[str, object] = {}
    for name in struct.__struct_fields__:
        value = getattr(struct, name)
        if is_unset(value) or value is None:
            continue
        values[name] = value
    return values


def is_unset(value: object) -> bool:
    """Return True when the value is msgspec.UNSET.

    Parameters
    ----------
    value
        Value to inspect.

    Returns
    -------
    bool
        True when the value is msgspec.UNSET.
    """
    return value is msgspec.UNSET


def coalesce_unset_or_none[T](value: T | msgspec.UnsetType | None, default: T) -> T:
    """Return a default when value is msgspec.UNSET or None.

    Parameters
    ----------
    value
        Value that may be msgspec.UNSET or None.
    default
        Default to use when value is msgspec.UNSET or None.

    Returns
    -------
    T
        Value or the provided default.
    """
    return default if value is msgspec.UNSET or value is None else value


__all__ = [
    "JSON_ENCODER",
    "JSON_ENCODER_SORTED",
    "StructBaseCompat",
    "StructBaseStrict",
    "coalesce_unset_or_none",
    "convert",
    "dumps_json",
    "is_unset",
    "present_fields",
    "struct_field_names",
    "to_builtins",
    "validation_error_payload",
]
