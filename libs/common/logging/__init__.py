"""Centralized structured logging library.

Structured JSON logging with a run ID that groups every log line emitted by
one provisioning run.

Usage:
    from libs.common.logging import configure_logging, RunContext, get_logger
    configure_logging(service_name="vault_namespace", log_level="INFO")

    with RunContext():
        logger = get_logger(__name__)
        log_with_context(logger, "INFO", "Applying plan", namespace="staging/my-app")
"""

from libs.common.logging.config import (
    RunIDFilter,
    configure_logging,
    get_logger,
    log_with_context,
)
from libs.common.logging.context import (
    RUN_ID_ENV_VAR,
    RunContext,
    clear_run_id,
    generate_run_id,
    get_run_id,
    set_run_id,
)
from libs.common.logging.formatter import JSONFormatter, mask_sensitive

__all__ = [
    # Configuration
    "configure_logging",
    "get_logger",
    "log_with_context",
    "RunIDFilter",
    # Run ID management
    "generate_run_id",
    "get_run_id",
    "set_run_id",
    "clear_run_id",
    "RunContext",
    "RUN_ID_ENV_VAR",
    # Formatter
    "JSONFormatter",
    "mask_sensitive",
]
