"""Type definitions and protocols for folder-size.

This package provides:
- Data models (immutable dataclasses)
- Protocol definitions (structural subtyping interfaces)
- Type aliases (PEP 695 modern syntax)
"""

from folder_size.types.aliases import PathSizeCache, StrPath
from folder_size.types.models import (
    ChildSize,
    FolderSizeResult,
    LimiterStats,
    WorkspaceReport,
)
from folder_size.types.protocols import CancellationSignal

__all__ = [
    # Type aliases
    "PathSizeCache",
    "StrPath",
    # Data models
    "ChildSize",
    "FolderSizeResult",
    "LimiterStats",
    "WorkspaceReport",
    # Protocols
    "CancellationSignal",
]
