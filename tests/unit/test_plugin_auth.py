"""Tests for credential loading and project resolution."""

from __future__ import annotations

import json

import pytest
from google.auth.exceptions import DefaultCredentialsError

from plugins import auth


def test_service_account_env_is_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure GCLOUD_SERVICE_ACCOUNT_CREDS builds service-account credentials."""
    info = {"type": "service_account", "project_id": "creds-project", "client_email": "a@b"}
    built: list[dict[str, object]] = []

    def _fake_from_info(payload: dict[str, object]) -> str:
        built.append(payload)
        return "service-account-credentials"

    monkeypatch.setenv("GCLOUD_SERVICE_ACCOUNT_CREDS", json.dumps(info))
    monkeypatch.setattr(auth, "credentials_from_info", _fake_from_info)
    context = auth.load_credentials()
    assert context.credentials == "service-account-credentials"
    assert context.credentials_info == info
    assert context.project_id == "creds-project"
    assert built == [info]


def test_invalid_service_account_json_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure malformed credential JSON is reported as a ValueError."""
    monkeypatch.setenv("GCLOUD_SERVICE_ACCOUNT_CREDS", "{not json")
    with pytest.raises(ValueError, match="GCLOUD_SERVICE_ACCOUNT_CREDS"):
        auth.load_credentials()


def test_service_account_json_must_be_object(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure non-object credential JSON is rejected."""
    monkeypatch.setenv("GCLOUD_SERVICE_ACCOUNT_CREDS", "[1, 2]")
    with pytest.raises(ValueError, match="JSON object"):
        auth.load_credentials()


def test_application_default_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure application default credentials are used without the env var."""
    monkeypatch.setattr(
        auth.google.auth,
        "default",
        lambda scopes=None: ("adc-credentials", "adc-project"),
    )
    context = auth.load_credentials()
    assert context.credentials == "adc-credentials"
    assert context.credentials_info is None
    assert context.project_id == "adc-project"


def test_missing_default_credentials_degrade(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure missing default credentials produce an empty context."""

    def _raise(scopes: object = None) -> tuple[object, str]:
        msg = f"no credentials for {scopes}"
        raise DefaultCredentialsError(msg)

    monkeypatch.setattr(auth.google.auth, "default", _raise)
    with caplog.at_level("WARNING"):
        context = auth.load_credentials()
    assert context == auth.AuthContext()
    assert "Application default credentials unavailable" in caplog.text


def test_project_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure explicit, environment, then credential projects are preferred in order."""
    context = auth.AuthContext(project_id="creds-project")
    assert auth.resolve_project_id(None, context) == "creds-project"
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "google-project")
    assert auth.resolve_project_id(None, context) == "google-project"
    monkeypatch.setenv("GCLOUD_PROJECT", "gcloud-project")
    assert auth.resolve_project_id(None, context) == "gcloud-project"
    assert auth.resolve_project_id("explicit-project", context) == "explicit-project"


def test_missing_project_raises() -> None:
    """Ensure an undeterminable project is reported."""
    with pytest.raises(ValueError, match="Google Cloud project"):
        auth.resolve_project_id(None, auth.AuthContext())
