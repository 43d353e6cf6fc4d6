"""Shared utility modules for common operations.

This package provides:
- Byte size formatting (bytes to human-readable)
- Time duration formatting (seconds to human-readable)
- Logging setup with correlation ID tracking
"""

from folder_size.utils.formatting import (
    SIZE_UNITS,
    ZERO_BYTES,
    format_bytes,
    format_duration,
)

__all__ = [
    "SIZE_UNITS",
    "ZERO_BYTES",
    "format_bytes",
    "format_duration",
]
