"""Folder Size - Concurrent recursive folder size reporting.

This package computes the total byte size of folder trees with a bounded
number of filesystem calls in flight, glob-based subtree pruning, a shared
per-path size cache and advisory cancellation between roots.
"""

from folder_size.core.data.filesystem import ConcurrencyLimiter, IgnoreMatcher, compute_size
from folder_size.core.orchestrator import analyze_folders, analyze_workspace, largest_children
from folder_size.core.session import SizeSession
from folder_size.types import ChildSize, FolderSizeResult, WorkspaceReport
from folder_size.utils.formatting import format_bytes

__all__ = [
    "ChildSize",
    "ConcurrencyLimiter",
    "FolderSizeResult",
    "IgnoreMatcher",
    "SizeSession",
    "WorkspaceReport",
    "analyze_folders",
    "analyze_workspace",
    "compute_size",
    "format_bytes",
    "largest_children",
]
