"""Tests for instrumentation selection and installation."""

from __future__ import annotations

from importlib.metadata import EntryPoint

import pytest
from opentelemetry.instrumentation.instrumentor import BaseInstrumentor

from obs.otel import instrumentation as otel_instrumentation
from obs.otel.config_resolution import production_defaults


class RecordingInstrumentor:
    """Instrumentor that records the keyword arguments it was installed with."""

    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    def instrument(self, **kwargs: object) -> None:
        """Record an install."""
        self.calls.append(kwargs)


class LibraryInstrumentor(BaseInstrumentor):
    """Library instrumentor with no package requirements."""

    def instrumentation_dependencies(self) -> tuple[str, ...]:
        """Return the packages this instrumentor targets."""
        return ()

    def _instrument(self, **kwargs: object) -> None:
        del kwargs

    def _uninstrument(self, **kwargs: object) -> None:
        del kwargs


class FailingInstrumentor:
    """Instrumentor whose install always fails."""

    def instrument(self, **kwargs: object) -> None:
        """Refuse to install."""
        msg = f"cannot instrument with {sorted(kwargs)}"
        raise RuntimeError(msg)


def _entry_point(name: str, target: str) -> EntryPoint:
    return EntryPoint(
        name=name,
        value=f"{__name__}:{target}",
        group=otel_instrumentation.INSTRUMENTOR_ENTRY_POINT_GROUP,
    )


def test_instrumentation_enabled_defaults_to_true() -> None:
    """Ensure instrumentations without options are enabled."""
    assert otel_instrumentation.instrumentation_enabled("requests", {})
    assert not otel_instrumentation.instrumentation_enabled(
        "urllib", {"urllib": {"enabled": False}}
    )


def test_instrumentation_kwargs_drop_enabled_flag() -> None:
    """Ensure per-name options become instrument() keyword arguments."""
    options = {"requests": {"enabled": True, "excluded_urls": "health"}}
    assert otel_instrumentation.instrumentation_kwargs("requests", options) == {
        "excluded_urls": "health"
    }
    assert otel_instrumentation.instrumentation_kwargs(None, options) == {}


def test_discovery_skips_disabled_and_broken_entry_points(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure disabled entries are skipped and broken ones are logged."""
    eps = [
        _entry_point("requests", "LibraryInstrumentor"),
        _entry_point("urllib", "RecordingInstrumentor"),
        _entry_point("missing", "DoesNotExist"),
    ]
    with caplog.at_level("WARNING"):
        resolved = otel_instrumentation.discover_auto_instrumentations(
            {"urllib": {"enabled": False}},
            eps=eps,
        )
    assert [item.name for item in resolved] == ["requests"]
    assert "missing" in caplog.text


def test_resolve_appends_explicit_instrumentations() -> None:
    """Ensure explicit instrumentations follow the automatic ones."""
    explicit = RecordingInstrumentor()
    config = production_defaults({"instrumentations": [explicit]})
    resolved = otel_instrumentation.resolve_instrumentations(
        config,
        eps=[_entry_point("requests", "LibraryInstrumentor")],
    )
    assert [item.name for item in resolved] == ["requests", None]
    assert resolved[-1].instrumentor is explicit


def test_resolve_without_auto_instrumentation() -> None:
    """Ensure disabling auto instrumentation keeps only explicit entries."""
    explicit = RecordingInstrumentor()
    config = production_defaults({"auto_instrumentation": False, "instrumentations": [explicit]})
    resolved = otel_instrumentation.resolve_instrumentations(
        config,
        eps=[_entry_point("requests", "LibraryInstrumentor")],
    )
    assert [item.instrumentor for item in resolved] == [explicit]


def test_install_passes_providers_and_skips_failures() -> None:
    """Ensure installation forwards kwargs and tolerates failing instrumentors."""
    recorder = RecordingInstrumentor()
    items = [
        otel_instrumentation.NamedInstrumentor(
            name="requests",
            instrumentor=recorder,
            options={"excluded_urls": "health"},
        ),
        otel_instrumentation.NamedInstrumentor(name=None, instrumentor=FailingInstrumentor()),
    ]
    installed = otel_instrumentation.install_instrumentations(items, tracer_provider="tp")
    assert [item.instrumentor for item in installed] == [recorder]
    assert recorder.calls == [{"tracer_provider": "tp", "excluded_urls": "health"}]


def test_discovery_rejects_non_library_instrumentors(caplog: pytest.LogCaptureFixture) -> None:
    """Ensure entry points must yield OpenTelemetry library instrumentors."""
    with caplog.at_level("WARNING"):
        resolved = otel_instrumentation.discover_auto_instrumentations(
            {},
            eps=[_entry_point("custom", "RecordingInstrumentor")],
        )
    assert resolved == []
    assert "custom returned invalid type" in caplog.text


class _DistEntryPoint:
    """Entry point stand-in that carries a distribution."""

    def __init__(self, name: str, dist: str) -> None:
        self.name = name
        self.dist = dist

    def load(self) -> type[LibraryInstrumentor]:
        """Return the instrumentor class."""
        return LibraryInstrumentor


def test_discovery_skips_dependency_conflicts(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure instrumentors whose target library is missing are skipped."""

    def _conflicts(dist: str) -> str | None:
        return "requests>=2 not installed" if dist == "old-dist" else None

    monkeypatch.setattr(otel_instrumentation, "get_dist_dependency_conflicts", _conflicts)
    eps = [_DistEntryPoint("flask", "old-dist"), _DistEntryPoint("requests", "new-dist")]
    with caplog.at_level("WARNING"):
        resolved = otel_instrumentation.discover_auto_instrumentations(
            {},
            eps=eps,  # type: ignore[arg-type]
        )
    assert [item.name for item in resolved] == ["requests"]
    assert isinstance(resolved[0].instrumentor, LibraryInstrumentor)
    assert "requests>=2 not installed" in caplog.text
