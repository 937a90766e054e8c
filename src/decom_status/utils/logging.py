"""Logging infrastructure with syslog integration and poll ID tracking.

This module configures logging for the decom-status application. The report
itself is written to stdout, so log records go to stderr (and optionally to
syslog). Every record carries the ID of the poll that produced it, held in a
ContextVar, and passes through a filter that redacts credentials.
"""

import contextvars
import logging
import logging.handlers
import sys
from typing import Final, override
from uuid import uuid4

from decom_status.utils.sanitization import (
    sanitize_args,
    sanitize_value,
)

# Poll ID context variable, set once per status query
poll_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "poll_id",
    default=None,
)

# Log format constants
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(poll_id)s] - %(message)s"

SYSLOG_LOG_FORMAT: Final[str] = "decom-status[%(process)d]: %(levelname)s - [%(poll_id)s] - %(name)s - %(message)s"

DEFAULT_SYSLOG_ADDRESS: Final[str] = "/dev/log"

# LogRecord attributes that are never redacted
_STANDARD_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    {
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
        "exc_info",
        "exc_text",
        "stack_info",
        "poll_id",
    }
)


class PollIDFilter(logging.Filter):
    """Logging filter that adds the current poll ID to log records.

    The ID is read from a ContextVar, so it follows the asyncio task that
    runs the poll without being passed around explicitly.
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        poll_id = poll_id_var.get()
        record.poll_id = poll_id if poll_id is not None else "-"
        return True


class SecretRedactingFilter(logging.Filter):
    """Logging filter that redacts credentials from log records.

    Sanitizes the message text, the % formatting args and any extra fields
    passed to the logger, so access keys, secret keys and request signatures
    never reach a handler.

    Examples:
        >>> logger.error("Request failed", extra={"authorization": "AWS4-HMAC-SHA256 ..."})
        # extra sanitized to: {"authorization": "<REDACTED>"}
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            sanitized_msg = sanitize_value(record.msg)
            if isinstance(sanitized_msg, str):
                record.msg = sanitized_msg

        if record.args and isinstance(record.args, tuple):
            record.args = sanitize_args(record.args)

        for attr_name in list(record.__dict__.keys()):
            if attr_name not in _STANDARD_RECORD_ATTRS and not attr_name.startswith("_"):
                attr_value: object = getattr(record, attr_name)  # pyright: ignore[reportAny]
                setattr(record, attr_name, sanitize_value(attr_value, field_name=attr_name))

        return True


def configure_logging(
    *,
    log_level: str = "WARNING",
    enable_syslog: bool = False,
    syslog_address: str = DEFAULT_SYSLOG_ADDRESS,
    enable_console: bool = True,
) -> None:
    """Configure application logging.

    Sets up:
    - Poll ID tracking via ContextVar
    - Optional syslog integration
    - Console output on stderr
    - Secret redaction

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_syslog: Enable syslog handler
        syslog_address: Syslog socket address (default: /dev/log)
        enable_console: Enable console handler on stderr

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> set_poll_id(new_poll_id())
        >>> logging.getLogger(__name__).info("Querying cluster", extra={"alias": "prod"})
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    poll_filter = PollIDFilter()
    secret_filter = SecretRedactingFilter()

    if enable_syslog:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=syslog_address,
                facility=logging.handlers.SysLogHandler.LOG_DAEMON,
            )
            syslog_handler.setFormatter(logging.Formatter(SYSLOG_LOG_FORMAT))
            syslog_handler.addFilter(poll_filter)
            syslog_handler.addFilter(secret_filter)
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
        console_handler.addFilter(poll_filter)
        console_handler.addFilter(secret_filter)
        root_logger.addHandler(console_handler)


def new_poll_id() -> str:
    """Return a short random identifier for one status query."""
    return uuid4().hex[:12]


def set_poll_id(poll_id: str) -> None:
    """Set the poll ID for the current context."""
    _ = poll_id_var.set(poll_id)


def get_poll_id() -> str | None:
    """Get the current poll ID from context, or None if not set."""
    return poll_id_var.get()


def clear_poll_id() -> None:
    """Clear the poll ID from the current context."""
    _ = poll_id_var.set(None)
