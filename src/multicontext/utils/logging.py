"""Structured logging setup for multicontext."""

import structlog
from pathlib import Path
from typing import Any
import os


def configure_logging(log_dir: Path | None = None) -> None:
    """
    Configure structlog for JSON logging to ~/.cache/multicontext/logs/multicontext.log.

    Log level can be controlled via MULTICONTEXT_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see every index update and sync payload
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Rank allocation, index entry rewrites, sync payload sizes
    - INFO: Submitted items, loaded/saved stores, CLI commands
    - WARNING: Redirects to the bare signifier, unknown policies
    - ERROR: Sync failures, corrupted stores, invariant violations

    Example:
        # Enable debug logging
        export MULTICONTEXT_LOG_LEVEL=DEBUG
        multicontext add Cat -c Animal

        # View logs with jq for readability:
        tail -f ~/.cache/multicontext/logs/multicontext.log | jq .
    """
    if log_dir is None:
        log_dir = Path.home() / ".cache" / "multicontext" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "multicontext.log"

    log_level = os.environ.get("MULTICONTEXT_LOG_LEVEL", "INFO").upper()

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    if log_level not in valid_levels:
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("item_submitted", value="Cat", context=["Animal"])
    """
    return structlog.get_logger(name)
