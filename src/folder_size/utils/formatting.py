"""Pure formatting utilities for human-readable output.

This module provides stateless formatting functions for converting raw data
into human-readable strings. All functions are pure with no side effects.
"""

from typing import Final

# Binary unit base (1024-based)
_K: Final[int] = 1024

SIZE_UNITS: Final[tuple[str, ...]] = (
    "Bytes",
    "KB",
    "MB",
    "GB",
    "TB",
    "PB",
    "EB",
    "ZB",
    "YB",
)

ZERO_BYTES: Final[str] = "0 Bytes"

# Time unit constants
_MINUTE = 60
_HOUR = _MINUTE * 60  # 3,600
_DAY = _HOUR * 24  # 86,400


def unit_index(bytes: int) -> int:
    """Return the index into SIZE_UNITS used to display ``bytes``.

    Equals ``floor(log1024(bytes))`` computed with integer arithmetic so exact
    powers of 1024 never land one unit too low, capped at the last unit.

    Args:
        bytes: Positive number of bytes

    Returns:
        Unit index between 0 and ``len(SIZE_UNITS) - 1``
    """
    index = 0
    threshold = _K
    while bytes >= threshold and index < len(SIZE_UNITS) - 1:
        index += 1
        threshold *= _K
    return index


def format_bytes(bytes: int, decimals: int = 2) -> str:
    """Convert bytes to human-readable size format.

    Picks the largest binary unit whose scaled value is at least 1, rounds to
    ``decimals`` places and drops trailing zeros, so whole values render
    without a fractional part.

    Args:
        bytes: Number of bytes to format (must be non-negative)
        decimals: Decimal places to round to (negative values count as 0)

    Returns:
        Human-readable string such as ``"1.5 KB"``; exactly ``"0 Bytes"``
        for zero.

    Examples:
        >>> format_bytes(0)
        '0 Bytes'
        >>> format_bytes(512)
        '512 Bytes'
        >>> format_bytes(2048)
        '2 KB'
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(1234567, decimals=1)
        '1.2 MB'
    """
    if bytes < 0:
        msg = "bytes must be non-negative"
        raise ValueError(msg)

    if bytes == 0:
        return ZERO_BYTES

    places = max(decimals, 0)
    index = unit_index(bytes)
    scaled = bytes / (_K**index)

    text = f"{scaled:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")

    return f"{text} {SIZE_UNITS[index]}"


def format_duration(seconds: float) -> str:
    """Convert seconds to human-readable duration format.

    Automatically selects appropriate time units based on magnitude.
    Shows the two most significant units for values over 1 hour.

    Args:
        seconds: Duration in seconds (must be non-negative)

    Returns:
        Human-readable duration string with adaptive granularity.
        - Days: "Xd Yh" (shows days and remaining hours)
        - Hours: "Xh Ym" (shows hours and remaining minutes)
        - Minutes: "Xm Ys" (shows minutes and remaining seconds)
        - Seconds: "Xs" (shows seconds only)

    Examples:
        >>> format_duration(45)
        '45s'
        >>> format_duration(90)
        '1m 30s'
        >>> format_duration(3665)
        '1h 1m'
    """
    if seconds < 0:
        msg = "seconds must be non-negative"
        raise ValueError(msg)

    total_seconds = int(seconds)

    if total_seconds >= _DAY:
        days = total_seconds // _DAY
        hours = (total_seconds % _DAY) // _HOUR
        if hours > 0:
            return f"{days}d {hours}h"
        return f"{days}d"

    if total_seconds >= _HOUR:
        hours = total_seconds // _HOUR
        minutes = (total_seconds % _HOUR) // _MINUTE
        if minutes > 0:
            return f"{hours}h {minutes}m"
        return f"{hours}h"

    if total_seconds >= _MINUTE:
        minutes = total_seconds // _MINUTE
        remaining = total_seconds % _MINUTE
        if remaining > 0:
            return f"{minutes}m {remaining}s"
        return f"{minutes}m"

    return f"{total_seconds}s"
