"""Pure formatting utilities for human-readable output.

This module provides stateless formatting functions for converting raw
decommission counters and timestamps into human-readable strings. All
functions are pure with no side effects.
"""

import math
from datetime import UTC, datetime, timedelta

# Binary unit constants (1024-based, IEC prefixes)
_BASE = 1024
_SIZE_UNITS: tuple[str, ...] = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")

# Time unit constants
_MINUTE = 60
_HOUR = _MINUTE * 60  # 3,600
_DAY = _HOUR * 24  # 86,400

# Shown when a duration is shorter than one whole minute
LESS_THAN_A_MINUTE = "< 1m"

_REL_DAY = timedelta(days=1)
_REL_WEEK = _REL_DAY * 7
_REL_MONTH = _REL_DAY * 30
_REL_YEAR = _REL_MONTH * 12
_REL_LONG_TIME = _REL_YEAR * 37

# (upper bound, template, divisor); first bound greater than the difference wins
_RELATIVE_MAGNITUDES: tuple[tuple[timedelta, str, timedelta | None], ...] = (
    (timedelta(seconds=1), "now", None),
    (timedelta(seconds=2), "1 second", None),
    (timedelta(minutes=1), "{} seconds", timedelta(seconds=1)),
    (timedelta(minutes=2), "1 minute", None),
    (timedelta(hours=1), "{} minutes", timedelta(minutes=1)),
    (timedelta(hours=2), "1 hour", None),
    (_REL_DAY, "{} hours", timedelta(hours=1)),
    (_REL_DAY * 2, "1 day", None),
    (_REL_WEEK, "{} days", _REL_DAY),
    (_REL_WEEK * 2, "1 week", None),
    (_REL_MONTH, "{} weeks", _REL_WEEK),
    (_REL_MONTH * 2, "1 month", None),
    (_REL_YEAR, "{} months", _REL_MONTH),
    (_REL_MONTH * 18, "1 year", None),
    (_REL_YEAR * 2, "2 years", None),
    (_REL_LONG_TIME, "{} years", _REL_YEAR),
    (timedelta.max, "a long while", None),
)


def format_size(bytes: int) -> str:
    """Convert bytes to human-readable size format.

    Uses binary units (1024-based) with IEC prefixes. Values are rounded to
    one decimal place; the decimal is only shown below 10 units.

    Args:
        bytes: Number of bytes to format (must be non-negative)

    Returns:
        Human-readable string representation of the size.

    Examples:
        >>> format_size(9)
        '9 B'
        >>> format_size(1023)
        '1023 B'
        >>> format_size(1024)
        '1.0 KiB'
        >>> format_size(1048575)
        '1024 KiB'
        >>> format_size(229638144)
        '219 MiB'
    """
    if bytes < 0:
        msg = "bytes must be non-negative"
        raise ValueError(msg)

    if bytes < 10:
        return f"{bytes} B"

    # Integer comparison keeps exact powers of 1024 on the right unit
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and bytes >= _BASE ** (exponent + 1):
        exponent += 1

    value = math.floor(bytes / _BASE**exponent * 10 + 0.5) / 10
    unit = _SIZE_UNITS[exponent]

    if value < 10:
        return f"{value:.1f} {unit}"
    return f"{value:.0f} {unit}"


def format_rate(bytes_per_second: float) -> str:
    """Convert bytes per second to human-readable data rate.

    Args:
        bytes_per_second: Transfer rate in bytes/second (must be non-negative)

    Returns:
        Size string for the whole bytes moved per second with a '/sec' suffix.

    Examples:
        >>> format_rate(512.0)
        '512 B/sec'
        >>> format_rate(2551535.0)
        '2.4 MiB/sec'
    """
    if bytes_per_second < 0:
        msg = "bytes_per_second must be non-negative"
        raise ValueError(msg)

    return f"{format_size(int(bytes_per_second))}/sec"


def format_duration(seconds: float) -> str:
    """Convert seconds to a compact days/hours/minutes string.

    Seconds are truncated to whole minutes. Zero-valued components are
    omitted, and anything under one minute collapses to ``"< 1m"``.

    Args:
        seconds: Duration in seconds (must be non-negative)

    Returns:
        Duration string such as ``"1d 2h 5m"``.

    Examples:
        >>> format_duration(0)
        '< 1m'
        >>> format_duration(7500)
        '2h 5m'
        >>> format_duration(90000)
        '1d 1h'
        >>> format_duration(86460)
        '1d 1m'
    """
    if seconds < 0:
        msg = "seconds must be non-negative"
        raise ValueError(msg)

    total_seconds = int(seconds)
    days = total_seconds // _DAY
    hours = (total_seconds // _HOUR) % 24
    minutes = (total_seconds // _MINUTE) % 60

    parts: list[str] = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if not parts:
        return LESS_THAN_A_MINUTE
    return " ".join(parts)


def format_relative_time(then: datetime, now: datetime) -> str:
    """Describe the distance between two instants in coarse units.

    The direction is not part of the result; callers append "ago" or
    "from now" themselves.

    Args:
        then: Reference instant
        now: Current instant

    Returns:
        Phrase such as ``"now"``, ``"1 minute"`` or ``"3 hours"``.

    Examples:
        >>> base = datetime(2024, 1, 1, 12, 0, 0)
        >>> format_relative_time(base, base + timedelta(seconds=90))
        '1 minute'
        >>> format_relative_time(base, base + timedelta(hours=5))
        '5 hours'
    """
    diff = now - then if now >= then else then - now

    for bound, template, divisor in _RELATIVE_MAGNITUDES:
        if bound > diff:
            if divisor is None:
                return template
            return template.format(diff // divisor)

    return _RELATIVE_MAGNITUDES[-1][1]


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as an RFC 3339 timestamp with second precision.

    Naive datetimes are treated as UTC. UTC is written with the ``Z`` suffix,
    other offsets as ``+HH:MM``.

    Examples:
        >>> format_timestamp(datetime(2024, 1, 1, 10, 0, 0, 500, tzinfo=UTC))
        '2024-01-01T10:00:00Z'
    """
    offset = moment.utcoffset()
    if offset is None or offset == timedelta(0):
        return moment.replace(tzinfo=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    return moment.replace(microsecond=0).isoformat(timespec="seconds")


def format_percent(fraction: float) -> str:
    """Format a 0..1 fraction as a percentage with one decimal place."""
    return f"{fraction * 100:.1f}%"
