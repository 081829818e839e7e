"""Resource construction helpers for OpenTelemetry."""

from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version

from opentelemetry.sdk.resources import Resource

from obs.otel.constants import ResourceAttribute
from utils.env_utils import env_value

_DEFAULT_SERVICE_NAME = "genkit"
_DISTRIBUTION_NAME = "genkit-gcp-plugins"


@dataclass(frozen=True)
class ResourceOptions:
    """Optional resource attributes for OpenTelemetry resources."""

    service_version: str | None = None
    environment: str | None = None
    project_id: str | None = None


def resolve_service_name(default: str = _DEFAULT_SERVICE_NAME) -> str:
    """Resolve the service name using env overrides.

    Parameters
    ----------
    default
        Default service name.

    Returns:
    -------
    str
        Resolved service name.
    """
    return env_value("OTEL_SERVICE_NAME") or default


def resolve_service_version() -> str | None:
    """Return the installed plugin version, if known."""
    try:
        return version(_DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return None


def build_resource(service_name: str, options: ResourceOptions | None = None) -> Resource:
    """Build a Resource with service identity and Google Cloud attributes.

    Parameters
    ----------
    service_name
        Service name to record.
    options
        Optional version, environment and project settings.

    Returns:
    -------
    Resource
        OpenTelemetry resource with merged attributes.
    """
    resolved = options or ResourceOptions()
    payload: dict[str, str] = {ResourceAttribute.SERVICE_NAME.value: service_name}
    if resolved.service_version:
        payload[ResourceAttribute.SERVICE_VERSION.value] = resolved.service_version
    if resolved.environment:
        payload[ResourceAttribute.DEPLOYMENT_ENVIRONMENT.value] = resolved.environment
    if resolved.project_id:
        payload[ResourceAttribute.CLOUD_PROVIDER.value] = "gcp"
        payload[ResourceAttribute.CLOUD_ACCOUNT_ID.value] = resolved.project_id
    return Resource.create(payload)


__all__ = ["ResourceOptions", "build_resource", "resolve_service_name", "resolve_service_version"]
