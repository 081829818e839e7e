"""Canonical OpenTelemetry and Cloud Logging constants for Genkit."""

from __future__ import annotations

from enum import StrEnum


class ResourceAttribute(StrEnum):
    """Canonical resource attribute names."""

    SERVICE_NAME = "service.name"
    SERVICE_VERSION = "service.version"
    DEPLOYMENT_ENVIRONMENT = "deployment.environment.name"
    CLOUD_PROVIDER = "cloud.provider"
    CLOUD_ACCOUNT_ID = "cloud.account.id"


class CloudLogField(StrEnum):
    """Structured log keys understood by Cloud Logging."""

    TRACE = "logging.googleapis.com/trace"
    SPAN_ID = "logging.googleapis.com/spanId"
    TRACE_SAMPLED = "logging.googleapis.com/trace_sampled"


GENKIT_LOG_NAME = "genkit_log"
GENKIT_LOG_LABELS = {"module": "genkit"}
GENKIT_LOGGER_NAME = "genkit"
GENKIT_METRIC_PREFIX = "workload.googleapis.com"


__all__ = [
    "GENKIT_LOGGER_NAME",
    "GENKIT_LOG_LABELS",
    "GENKIT_LOG_NAME",
    "GENKIT_METRIC_PREFIX",
    "CloudLogField",
    "ResourceAttribute",
]
