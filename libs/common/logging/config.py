"""Centralized logging configuration.

Structured JSON output to stderr with run ID injection. The CLI calls
configure_logging() once at startup; stdout is left free for command output
(resolved path, plan JSON, deployment environment).

Example:
    >>> from libs.common.logging.config import configure_logging
    >>> logger = configure_logging(service_name="vault_namespace", log_level="INFO")
    >>> logger.info("Provisioning started", extra={"context": {"app_name": "my-app"}})
"""

import logging
import sys
from typing import Optional, TextIO

from libs.common.logging.context import get_run_id
from libs.common.logging.formatter import JSONFormatter


class RunIDFilter(logging.Filter):
    """Logging filter that adds the current run ID to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id()
        return True


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure structured JSON logging.

    Sets up the root logger with:
    - JSON formatted output (stderr by default)
    - Run ID injection on all records
    - Specified log level

    Args:
        service_name: Name reported in the "service" field
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_context: Whether to include context dict in output
        stream: Output stream. Defaults to sys.stderr.

    Returns:
        Configured root logger instance

    Raises:
        ValueError: If log_level is invalid
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        JSONFormatter(
            service_name=service_name,
            include_context=include_context,
        )
    )
    handler.addFilter(RunIDFilter())

    root_logger.addHandler(handler)

    # hvac/urllib3 connection chatter stays at WARNING
    for noisy in ("urllib3", "hvac"):
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    return root_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context_fields: object,
) -> None:
    """Log a message with additional context fields.

    Context fields appear in the "context" dict in JSON output.

    Example:
        >>> log_with_context(logger, "INFO", "Namespace resolved", namespace="staging/my-app")
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra={"context": context_fields})
