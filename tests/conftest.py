"""Shared pytest fixtures for the Genkit Google Cloud plugins."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from obs.gcp_logger import add_transport_stream_for_testing

_ISOLATED_ENV_VARS = (
    "GENKIT_ENV",
    "GCLOUD_SERVICE_ACCOUNT_CREDS",
    "GCLOUD_PROJECT",
    "GOOGLE_CLOUD_PROJECT",
    "OTEL_SERVICE_NAME",
    "GENKIT_FLOW_STATE_COLLECTION",
    "GENKIT_TRACE_COLLECTION",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear plugin environment variables and the test log stream."""
    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    add_transport_stream_for_testing(None)
