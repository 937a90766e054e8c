"""Shared utility modules for common operations.

This package provides pure, stateless utility functions for:
- Data size formatting (bytes to binary-prefixed strings)
- Duration and relative time formatting
- RFC 3339 timestamp formatting
- Secret sanitization for logs and error messages
"""

from decom_status.utils.formatting import (
    format_duration,
    format_percent,
    format_rate,
    format_relative_time,
    format_size,
    format_timestamp,
)
from decom_status.utils.sanitization import (
    REDACTED,
    sanitize_text,
    sanitize_value,
)

__all__ = [
    # Formatting utilities
    "format_duration",
    "format_percent",
    "format_rate",
    "format_relative_time",
    "format_size",
    "format_timestamp",
    # Sanitization
    "REDACTED",
    "sanitize_text",
    "sanitize_value",
]
