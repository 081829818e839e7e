"""Tests for sampler coercion."""

from __future__ import annotations

import pytest
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    TraceIdRatioBased,
)

from obs.otel.sampling import coerce_sampler


def test_sampler_instances_pass_through() -> None:
    """Ensure Sampler instances are returned unchanged."""
    sampler = TraceIdRatioBased(0.5)
    assert coerce_sampler(sampler) is sampler


def test_builtin_sampler_names() -> None:
    """Ensure OTEL_TRACES_SAMPLER-style names resolve."""
    assert coerce_sampler("always_on") is ALWAYS_ON
    assert coerce_sampler("ALWAYS_OFF") is ALWAYS_OFF
    assert isinstance(coerce_sampler("parentbased_always_on"), ParentBased)


def test_ratio_sampler_argument() -> None:
    """Ensure ratio samplers accept a colon-separated argument."""
    sampler = coerce_sampler("traceidratio:0.25")
    assert isinstance(sampler, TraceIdRatioBased)
    assert sampler.rate == pytest.approx(0.25)


@pytest.mark.parametrize("name", ["bogus", "traceidratio:2.0", "traceidratio:abc"])
def test_invalid_sampler_falls_back(name: str, caplog: pytest.LogCaptureFixture) -> None:
    """Ensure unknown samplers warn and sample everything."""
    with caplog.at_level("WARNING"):
        assert coerce_sampler(name) is ALWAYS_ON
    assert "defaulting to always_on" in caplog.text
