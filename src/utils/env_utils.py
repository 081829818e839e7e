"""Unified environment variable resolution utilities."""

from __future__ import annotations

import os

import msgspec

from serde_msgspec import validation_error_payload

# -----------------------------------------------------------------------------
# String Helpers
# -----------------------------------------------------------------------------


def env_value(name: str) -> str | None:
    """Return stripped env var value, or None if empty/not set.

    Parameters
    ----------
    name
        Environment variable name.

    Returns
    -------
    str | None
        Stripped value or None.
    """
    raw = os.environ.get(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped if stripped else None


def env_text(
    name: str,
    *,
    default: str | None = None,
    strip: bool = True,
    allow_empty: bool = False,
) -> str | None:
    """Return an environment variable string with optional normalization.

    Parameters
    ----------
    name
        Environment variable name.
    default
        Default value if not set or empty (unless allow_empty is True).
    strip
        Whether to strip whitespace from the value.
    allow_empty
        Whether to return empty strings instead of the default.

    Returns
    -------
    str | None
        Parsed value, or default/None when missing.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip() if strip else raw
    if not value and not allow_empty:
        return default
    return value


def env_first(*names: str) -> str | None:
    """Return the first non-empty value among several env vars."""
    for name in names:
        value = env_value(name)
        if value is not None:
            return value
    return None


# -----------------------------------------------------------------------------
# Structured Values
# -----------------------------------------------------------------------------


def env_json_object(name: str) -> dict[str, object] | None:
    """Parse an environment variable holding a JSON object.

    Parameters
    ----------
    name
        Environment variable name.

    Returns
    -------
    dict[str, object] | None
        Decoded object, or None when the variable is not set.

    Raises
    ------
    ValueError
        Raised when the value is not valid JSON or not a JSON object.
    """
    raw = env_value(name)
    if raw is None:
        return None
    try:
        return msgspec.json.decode(raw, type=dict[str, object])
    except msgspec.ValidationError as exc:
        details = validation_error_payload(exc)
        msg = f"{name} must hold a JSON object: {details.get('summary', exc)}"
        raise ValueError(msg) from exc
    except msgspec.DecodeError as exc:
        msg = f"{name} is not valid JSON: {exc}"
        raise ValueError(msg) from exc


__all__ = ["env_first", "env_json_object", "env_text", "env_value"]
