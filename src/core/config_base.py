"""Base configuration fingerprinting helpers.

Fingerprints are used to tell whether two resolved configurations would wire
telemetry the same way. Live SDK objects (samplers, instrumentors) are
represented by their qualified names so the payload stays JSON-compatible.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from utils.hashing import hash_json_canonical


@runtime_checkable
class FingerprintableConfig(Protocol):
    """Protocol for configs that provide fingerprint payloads."""

    def fingerprint_payload(self) -> Mapping[str, object]:
        """Return a canonical payload for fingerprinting."""
        ...

    def fingerprint(self) -> str:
        """Return a deterministic fingerprint for the payload.

        Returns
        -------
        str
            Deterministic fingerprint for the payload.
        """
        return config_fingerprint(self.fingerprint_payload())


def type_name(obj: object | None) -> str | None:
    """Return the qualified type name of an object, or None.

    Returns
    -------
    str | None
        ``module.QualName`` for the object's class.
    """
    if obj is None:
        return None
    return f"{obj.__class__.__module__}.{obj.__class__.__qualname__}"


def fingerprint_value(value: object) -> object:
    """Return a JSON-compatible stand-in for a configuration value.

    Mappings and sequences are walked recursively. Callables are named by
    their qualified name and other live objects by their type name.

    Returns
    -------
    object
        Builtin representation of the value.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): fingerprint_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [fingerprint_value(item) for item in value]
        if isinstance(value, (set, frozenset)):
            return sorted(items, key=repr)
        return items
    if isinstance(value, type) or (callable(value) and hasattr(value, "__qualname__")):
        return f"{value.__module__}.{value.__qualname__}"
    return type_name(value)


def config_fingerprint(payload: Mapping[str, object]) -> str:
    """Return a deterministic fingerprint for configuration payloads.

    Parameters
    ----------
    payload
        Mapping of configuration values.

    Returns
    -------
    str
        SHA-256 hexdigest for the payload.
    """
    return hash_json_canonical(payload, str_keys=True)


__all__ = ["FingerprintableConfig", "config_fingerprint", "fingerprint_value", "type_name"]
