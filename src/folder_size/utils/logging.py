"""Structured logging infrastructure with syslog integration and correlation ID tracking.

This module provides the logging setup for folder-size: a console handler on
stderr (stdout is reserved for command output), optional syslog integration,
and correlation ID tracking using ContextVar so every log line emitted during
one analysis run can be traced back to it, including lines logged from walker
tasks and worker threads.
"""

import contextvars
import logging
import logging.handlers
import sys
import uuid
from typing import Final, override

# Correlation ID context variable for tracking one analysis run
# Automatically inherited by asyncio tasks and asyncio.to_thread workers
correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)

# Log format constants
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"

SYSLOG_LOG_FORMAT: Final[str] = (
    "folder-size[%(process)d]: %(levelname)s - [%(correlation_id)s] - %(name)s - %(message)s"
)

DEFAULT_SYSLOG_ADDRESS: Final[str] = "/dev/log"


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records.

    Retrieves the correlation ID from the ContextVar and adds it to each
    log record. The ID is inherited by:
    - Asyncio tasks created within the same context (child walks)
    - Worker threads started through asyncio.to_thread (syscalls)
    - All function calls within the same execution context
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation ID to log record from ContextVar.

        Args:
            record: Log record to enhance with correlation ID

        Returns:
            True to allow the record to be logged
        """
        correlation_id = correlation_id_var.get()
        record.correlation_id = correlation_id if correlation_id is not None else "N/A"
        return True


def configure_logging(
    *,
    log_level: str = "INFO",
    enable_syslog: bool = False,
    syslog_address: str = DEFAULT_SYSLOG_ADDRESS,
    enable_console: bool = True,
) -> None:
    """Configure application logging.

    Sets up logging infrastructure with:
    - Correlation ID tracking via ContextVar
    - Optional syslog integration
    - Console output on stderr

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_syslog: Enable syslog handler
        syslog_address: Syslog socket address (default: /dev/log)
        enable_console: Enable console output handler

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> set_correlation_id("abc-123")
        >>> logging.getLogger(__name__).info("Walk started", extra={"root": "/tmp"})
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    correlation_filter = CorrelationIDFilter()

    if enable_syslog:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=syslog_address,
                facility=logging.handlers.SysLogHandler.LOG_USER,
            )
            syslog_handler.setFormatter(logging.Formatter(SYSLOG_LOG_FORMAT))
            syslog_handler.addFilter(correlation_filter)
            root_logger.addHandler(syslog_handler)

        except OSError as exc:
            # Syslog not available (e.g., containers, macOS without /dev/log)
            print(
                f"Warning: Could not connect to syslog at {syslog_address}: {exc}",
                file=sys.stderr,
            )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        console_handler.addFilter(correlation_filter)
        root_logger.addHandler(console_handler)


def generate_correlation_id() -> str:
    """Generate a short correlation ID for one analysis run.

    Returns:
        First 12 hex characters of a random UUID
    """
    return uuid.uuid4().hex[:12]


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Unique identifier for correlation (e.g., UUID)
    """
    _ = correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get the current correlation ID from context.

    Returns:
        Current correlation ID or None if not set
    """
    return correlation_id_var.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID from the current context."""
    _ = correlation_id_var.set(None)
