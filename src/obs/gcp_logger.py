"""Genkit debug logging routed to the console or Google Cloud Logging."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

from obs.otel.constants import (
    GENKIT_LOG_LABELS,
    GENKIT_LOG_NAME,
    GENKIT_LOGGER_NAME,
    CloudLogField,
)
from obs.otel.logging import install_trace_context_filter
from serde_msgspec import dumps_json

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

    from obs.otel.config_types import GcpPluginConfig

_HANDLER_PREFIX = "genkit."

_STATE: dict[str, TextIO | None] = {"stream": None}


class ConsoleLogFormatter(logging.Formatter):
    """Format records as ``[level] message``."""

    def format(self, record: logging.LogRecord) -> str:
        """Return the console line for a record.

        Returns
        -------
        str
            Formatted log line.
        """
        line = f"[{record.levelname.lower()}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JsonLogFormatter(logging.Formatter):
    """Format records as single-line JSON understood by Cloud Logging."""

    def __init__(self, project_id: str | None = None) -> None:
        super().__init__()
        self._project_id = project_id

    def format(self, record: logging.LogRecord) -> str:
        """Return the JSON payload for a record.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        payload: dict[str, object] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
        }
        trace_id = getattr(record, "trace_id", None)
        span_id = getattr(record, "span_id", None)
        if trace_id is not None:
            payload["trace_id"] = trace_id
            payload["span_id"] = span_id
            if self._project_id:
                payload[CloudLogField.TRACE.value] = (
                    f"projects/{self._project_id}/traces/{trace_id}"
                )
                payload[CloudLogField.SPAN_ID.value] = span_id
                payload[CloudLogField.TRACE_SAMPLED.value] = bool(
                    getattr(record, "trace_sampled", False)
                )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return dumps_json(payload).decode("utf-8")


def _build_cloud_handler(
    project_id: str | None,
    credentials: Credentials | None,
) -> logging.Handler:
    from google.cloud.logging import Client
    from google.cloud.logging.handlers import CloudLoggingHandler

    client = Client(project=project_id, credentials=credentials)
    return CloudLoggingHandler(client, name=GENKIT_LOG_NAME, labels=dict(GENKIT_LOG_LABELS))


def add_transport_stream_for_testing(stream: TextIO | None) -> None:
    """Send records from subsequently created loggers to an extra stream.

    Passing ``None`` removes the extra stream.
    """
    _STATE["stream"] = stream


class GcpLogger:
    """Provides the Genkit logger for a Google Cloud plugin configuration."""

    def __init__(self, config: GcpPluginConfig) -> None:
        self._config = config

    @property
    def config(self) -> GcpPluginConfig:
        """Return the plugin configuration."""
        return self._config

    @property
    def exporting(self) -> bool:
        """Return True when records are shipped to Cloud Logging."""
        return self._config.telemetry_config.export

    def formatter(self) -> logging.Formatter:
        """Return the formatter shared by every handler of this logger.

        Returns
        -------
        logging.Formatter
            JSON formatter when exporting, console formatter otherwise.
        """
        if self.exporting:
            return JsonLogFormatter(self._config.project_id)
        return ConsoleLogFormatter()

    def _handlers(self) -> list[logging.Handler]:
        primary = (
            _build_cloud_handler(self._config.project_id, self._config.credentials)
            if self.exporting
            else logging.StreamHandler()
        )
        primary.set_name(f"{_HANDLER_PREFIX}primary")
        handlers = [primary]
        stream = _STATE["stream"]
        if stream is not None:
            extra = logging.StreamHandler(stream)
            extra.set_name(f"{_HANDLER_PREFIX}stream")
            handlers.append(extra)
        return handlers

    def get_logger(self, env: str | None = None) -> logging.Logger:
        """Return a configured logger, replacing handlers from earlier calls.

        Parameters
        ----------
        env
            Optional Genkit environment name; when given the logger is a child
            of the ``genkit`` logger named after it.

        Returns
        -------
        logging.Logger
            Logger writing to Cloud Logging or the console.
        """
        name = GENKIT_LOGGER_NAME if env is None else f"{GENKIT_LOGGER_NAME}.{env}"
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if (handler.get_name() or "").startswith(_HANDLER_PREFIX):
                logger.removeHandler(handler)
                handler.close()
        formatter = self.formatter()
        for handler in self._handlers():
            handler.setFormatter(formatter)
            install_trace_context_filter(handler)
            logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
        return logger


__all__ = [
    "ConsoleLogFormatter",
    "GcpLogger",
    "JsonLogFormatter",
    "add_transport_stream_for_testing",
]
