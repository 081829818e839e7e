"""Credential and project resolution shared by the Google Cloud plugins."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import google.auth
from google.auth.exceptions import DefaultCredentialsError
from google.oauth2 import service_account

from utils.env_utils import env_first, env_json_object

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

_LOGGER = logging.getLogger(__name__)

SERVICE_ACCOUNT_CREDS_ENV = "GCLOUD_SERVICE_ACCOUNT_CREDS"
PROJECT_ENV_VARS = ("GCLOUD_PROJECT", "GOOGLE_CLOUD_PROJECT")
CLOUD_PLATFORM_SCOPES = ("https://www.googleapis.com/auth/cloud-platform",)


@dataclass(frozen=True)
class AuthContext:
    """Credentials discovered for the current process."""

    credentials: Credentials | None = None
    credentials_info: Mapping[str, object] | None = None
    project_id: str | None = None


def credentials_from_info(info: Mapping[str, object]) -> Credentials:
    """Build service-account credentials from a parsed key file.

    Returns
    -------
    Credentials
        Service-account credentials scoped to Cloud Platform.

    Raises
    ------
    ValueError
        Raised when the key material is incomplete.
    """
    return service_account.Credentials.from_service_account_info(
        dict(info),
        scopes=list(CLOUD_PLATFORM_SCOPES),
    )


def load_credentials() -> AuthContext:
    """Load credentials from ``GCLOUD_SERVICE_ACCOUNT_CREDS`` or the environment.

    The variable holds a service-account key as JSON. Without it, application
    default credentials are used when available.

    Returns
    -------
    AuthContext
        Discovered credentials and the project they belong to.

    Raises
    ------
    ValueError
        Raised when ``GCLOUD_SERVICE_ACCOUNT_CREDS`` is not a JSON object.
    """
    info = env_json_object(SERVICE_ACCOUNT_CREDS_ENV)
    if info is not None:
        project_id = info.get("project_id")
        return AuthContext(
            credentials=credentials_from_info(info),
            credentials_info=info,
            project_id=project_id if isinstance(project_id, str) else None,
        )
    try:
        credentials, project_id = google.auth.default(scopes=list(CLOUD_PLATFORM_SCOPES))
    except DefaultCredentialsError as exc:
        _LOGGER.warning("Application default credentials unavailable: %s", exc)
        return AuthContext()
    return AuthContext(credentials=credentials, project_id=project_id)


def resolve_project_id(explicit: str | None, auth: AuthContext) -> str:
    """Return the project telemetry and storage are bound to.

    An explicit project wins, then ``GCLOUD_PROJECT`` and
    ``GOOGLE_CLOUD_PROJECT``, then the project of the discovered credentials.

    Returns
    -------
    str
        Resolved project id.

    Raises
    ------
    ValueError
        Raised when no project can be determined.
    """
    project_id = explicit or env_first(*PROJECT_ENV_VARS) or auth.project_id
    if not project_id:
        msg = (
            "Unable to determine the Google Cloud project. Pass project_id or set "
            "GCLOUD_PROJECT."
        )
        raise ValueError(msg)
    return project_id


__all__ = [
    "CLOUD_PLATFORM_SCOPES",
    "PROJECT_ENV_VARS",
    "SERVICE_ACCOUNT_CREDS_ENV",
    "AuthContext",
    "credentials_from_info",
    "load_credentials",
    "resolve_project_id",
]
