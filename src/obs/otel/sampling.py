"""Sampling helpers for OpenTelemetry."""

from __future__ import annotations

import logging

from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_SAMPLER: Sampler = ALWAYS_ON


def _parse_ratio(raw: str | None) -> float | None:
    if raw is None:
        return 1.0
    try:
        ratio = float(raw.strip())
    except ValueError:
        return None
    if not (0.0 <= ratio <= 1.0):
        return None
    return ratio


def _resolve_builtin_sampler(name: str, ratio: float) -> Sampler | None:
    if name in {"always_on", "parentbased_always_on"}:
        sampler: Sampler = ALWAYS_ON
    elif name in {"always_off", "parentbased_always_off"}:
        sampler = ALWAYS_OFF
    elif "traceidratio" in name:
        sampler = TraceIdRatioBased(ratio)
    else:
        return None
    if name.startswith("parentbased"):
        return ParentBased(sampler)
    return sampler


def coerce_sampler(value: Sampler | str) -> Sampler:
    """Return a sampler for a ``Sampler`` instance or a sampler name.

    Names follow ``OTEL_TRACES_SAMPLER`` (``always_on``, ``always_off``,
    ``traceidratio``, ``parentbased_*``); ratio samplers accept an argument
    after a colon, e.g. ``traceidratio:0.25``. Unknown names fall back to
    sampling everything.

    Returns
    -------
    Sampler
        Sampler to install on the tracer provider.
    """
    if isinstance(value, Sampler):
        return value
    name, _, arg = value.partition(":")
    normalized = name.strip().lower()
    ratio = _parse_ratio(arg or None)
    if ratio is None:
        _LOGGER.warning("Invalid sampler argument %r; defaulting to always_on.", value)
        return DEFAULT_SAMPLER
    sampler = _resolve_builtin_sampler(normalized, ratio)
    if sampler is None:
        _LOGGER.warning("Unsupported sampler %s; defaulting to always_on.", normalized)
        return DEFAULT_SAMPLER
    return sampler


__all__ = ["DEFAULT_SAMPLER", "coerce_sampler"]
