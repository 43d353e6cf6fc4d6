"""Filesystem operations: ignore patterns, limiter and recursive size calculation."""

from __future__ import annotations

from .exclusions import GlobPattern, IgnoreMatcher, normalize_path
from .ignore_file import (
    DEFAULT_IGNORE_FILE,
    load_effective_patterns,
    merge_patterns,
    read_ignore_file,
    top_level_directories,
    top_level_pattern,
    write_top_level_selection,
)
from .limiter import DEFAULT_CONCURRENCY_LIMIT, ConcurrencyLimiter
from .size_calculator import SizeCalculator, compute_size

__all__ = [
    "DEFAULT_CONCURRENCY_LIMIT",
    "DEFAULT_IGNORE_FILE",
    "ConcurrencyLimiter",
    "GlobPattern",
    "IgnoreMatcher",
    "SizeCalculator",
    "compute_size",
    "load_effective_patterns",
    "merge_patterns",
    "normalize_path",
    "read_ignore_file",
    "top_level_directories",
    "top_level_pattern",
    "write_top_level_selection",
]
