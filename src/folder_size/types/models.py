"""Data models for folder-size.

This module defines immutable dataclasses used throughout the application
for type-safe data transfer between components.
"""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FolderSizeResult:
    """Outcome of sizing one requested root path.

    Created fresh per batch call and never mutated. When ``error`` is set the
    size is 0 and the formatted size is the zero-byte label.
    """

    path: str
    size: int
    formatted_size: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the root was sized without error."""
        return self.error is None


@dataclass(slots=True, frozen=True)
class ChildSize:
    """One row of a largest-children ranking."""

    name: str
    path: str
    size: int
    formatted_size: str


@dataclass(slots=True, frozen=True)
class WorkspaceReport:
    """Sizes of a workspace's target folders plus their combined total.

    Only error-free results contribute to ``total_size``.
    """

    root: str
    results: Sequence[FolderSizeResult]
    total_size: int
    formatted_total: str


@dataclass(slots=True, frozen=True)
class LimiterStats:
    """Point-in-time snapshot of concurrency limiter instrumentation."""

    limit: int
    active: int
    peak: int
    completed: int
