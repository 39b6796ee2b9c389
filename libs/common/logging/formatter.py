"""JSON log formatter for structured logging.

This module provides a custom logging formatter that outputs logs in JSON format
with a standardized schema, so provisioning runs can be shipped to a log
aggregator and grouped by run ID.

Example log output:
    {
        "timestamp": "2026-10-19T10:30:00.000Z",
        "level": "INFO",
        "service": "vault_namespace",
        "run_id": "abc123-def456",
        "message": "Created namespace",
        "context": {
            "namespace": "production/acme-corp-uuid"
        }
    }

Context keys that name credentials (secret_id, token, ...) are masked even if
a caller passes them by mistake.
"""

import json
import logging
import traceback
from datetime import UTC, datetime
from types import TracebackType
from typing import Any

MASK = "***"

SENSITIVE_KEYS = frozenset(
    {
        "secret_id",
        "role_id",
        "token",
        "vault_token",
        "client_token",
        "password",
    }
)

_RESERVED_LOGGING_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "run_id",
    "context",
    "exc_info",
    "exc_text",
    "stack_info",
}


def mask_sensitive(context: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``context`` with credential-named keys masked."""
    return {
        key: (MASK if key.lower() in SENSITIVE_KEYS and value else value)
        for key, value in context.items()
    }


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs logs as JSON.

    Formats log records into structured JSON with a consistent schema:
    timestamp, level, service name, run ID, message, optional context
    data, exception info and source location.

    Example:
        >>> formatter = JSONFormatter(service_name="vault_namespace")
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
        >>> logger = logging.getLogger(__name__)
        >>> logger.addHandler(handler)
        >>> logger.info("Wrote policy", extra={"policy": "my-app-policy"})
    """

    def __init__(
        self, service_name: str, include_context: bool = True, *args: Any, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "service": self.service_name,
            "run_id": getattr(record, "run_id", None),
            "message": record.getMessage(),
        }

        if self.include_context:
            context = self._extract_context(record)
            if context:
                log_entry["context"] = mask_sensitive(context)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self._format_exception(record.exc_info),
            }

        log_entry["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_entry, default=str)

    def _format_timestamp(self, created: float) -> str:
        """Format a Unix timestamp as ISO 8601 in UTC with millisecond precision.

        Example:
            >>> JSONFormatter(service_name="test")._format_timestamp(1697884200.0)
            '2023-10-21T10:30:00.000Z'
        """
        dt = datetime.fromtimestamp(created, tz=UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def _extract_context(self, record: logging.LogRecord) -> dict[str, Any] | None:
        """Extract context from the record.

        An explicit ``context`` dict (see log_with_context) wins; otherwise all
        non-reserved extra fields are collected.
        """
        context = getattr(record, "context", None)
        if context and isinstance(context, dict):
            return dict(context)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOGGING_FIELDS
        }
        return extra if extra else None

    def _format_exception(
        self,
        exc_info: tuple[type[BaseException] | None, BaseException | None, TracebackType | None],
    ) -> str:
        return "".join(traceback.format_exception(*exc_info))
