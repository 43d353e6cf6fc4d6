"""Workspace-scoped size session.

A session owns every piece of mutable state shared between analyses of one
workspace: the size cache, the concurrency limiter, the ignore patterns and
the registry of in-flight per-path computations. Callers construct one
session per workspace and pass it around explicitly.

Walk generations:
    ``invalidate()`` without a path starts a new generation. The session
    swaps in a fresh cache object and forgets in-flight tasks; walks started
    in the previous generation keep writing into the cache object they were
    given, so a late result can never leak into the new generation.

    ``invalidate(path)`` keeps the generation but also swaps the cache object,
    copying every entry unrelated to the changed path. A walk that listed the
    changed subtree before the change finishes into the orphaned object.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import PurePath

from folder_size.core.data.filesystem import (
    ConcurrencyLimiter,
    IgnoreMatcher,
    SizeCalculator,
)
from folder_size.core.data.filesystem.limiter import DEFAULT_CONCURRENCY_LIMIT
from folder_size.core.orchestrator import (
    DEFAULT_TARGET_FOLDERS,
    DEFAULT_TOP_CHILDREN,
    analyze_folders,
    analyze_workspace,
    largest_children,
)
from folder_size.types import (
    CancellationSignal,
    ChildSize,
    FolderSizeResult,
    PathSizeCache,
    StrPath,
    WorkspaceReport,
)

logger = logging.getLogger(__name__)


def _is_related(candidate: str, changed: PurePath) -> bool:
    """Whether ``candidate`` is ``changed`` itself, one of its descendants or ancestors."""
    path = PurePath(candidate)
    return path == changed or path.is_relative_to(changed) or changed.is_relative_to(path)


class SizeSession:
    """Shared size state for one workspace."""

    def __init__(
        self,
        *,
        ignore_patterns: Iterable[str] = (),
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        decimals: int = 2,
    ) -> None:
        """Initialize the session.

        Args:
            ignore_patterns: Glob patterns pruning subtrees from every walk
            concurrency_limit: Slots of the session-wide limiter (>= 1)
            decimals: Decimal places for formatted sizes

        Raises:
            ValueError: If concurrency_limit is lower than 1
        """
        self.limiter: ConcurrencyLimiter = ConcurrencyLimiter(concurrency_limit)
        self.decimals: int = decimals
        self._ignore: IgnoreMatcher = IgnoreMatcher(ignore_patterns)
        self._cache: dict[str, int] = {}
        self._generation: int = 0
        self._in_flight: dict[str, asyncio.Task[int]] = {}

    @property
    def cache(self) -> PathSizeCache:
        """Cache of the current walk generation."""
        return self._cache

    @property
    def generation(self) -> int:
        """Number of the current walk generation."""
        return self._generation

    @property
    def ignore_patterns(self) -> list[str]:
        """Active ignore patterns."""
        return self._ignore.patterns

    def cached_size(self, path: StrPath) -> int | None:
        """Return the cached size of ``path``, or None if not yet computed."""
        return self._cache.get(os.fspath(path))

    def is_ignored(self, path: StrPath) -> bool:
        """Whether ``path`` matches one of the session's ignore patterns."""
        return self._ignore.should_ignore(path)

    def request_size(self, path: StrPath) -> asyncio.Task[int]:
        """Return the task computing the size of ``path``.

        The first requester starts the computation; later requesters for the
        same path receive the same task until it settles. Must be called with
        a running event loop.

        Args:
            path: Path to size

        Returns:
            Task resolving to the size in bytes
        """
        key = os.fspath(path)

        existing = self._in_flight.get(key)
        if existing is not None:
            return existing

        calculator = SizeCalculator(ignore=self._ignore, cache=self._cache, limiter=self.limiter)
        task = asyncio.get_running_loop().create_task(
            calculator.calculate_size(key),
            name=f"folder-size:{key}",
        )
        self._in_flight[key] = task

        def _settled(done: asyncio.Task[int]) -> None:
            # Only drop the entry if it still points at this task
            if self._in_flight.get(key) is done:
                del self._in_flight[key]

        task.add_done_callback(_settled)
        logger.debug("Size computation started", extra={"path": key, "generation": self._generation})
        return task

    async def size_of(self, path: StrPath) -> int:
        """Compute (or reuse) the size of ``path``.

        Cancelling the caller does not cancel the shared computation that
        other requesters may be waiting on.

        Args:
            path: Path to size

        Returns:
            Size in bytes
        """
        cached = self.cached_size(path)
        if cached is not None:
            return cached
        return await asyncio.shield(self.request_size(path))

    def in_flight(self) -> list[str]:
        """Paths with a computation currently running."""
        return list(self._in_flight)

    async def analyze(
        self,
        roots: Sequence[StrPath],
        *,
        signal: CancellationSignal | None = None,
    ) -> list[FolderSizeResult]:
        """Analyze roots with the session's cache, limiter and patterns.

        Args:
            roots: Paths to analyze
            signal: Advisory cancellation signal

        Returns:
            One result per root, in order
        """
        return await analyze_folders(
            roots,
            ignore=self._ignore,
            cache=self._cache,
            signal=signal,
            limiter=self.limiter,
            decimals=self.decimals,
        )

    async def analyze_workspace(
        self,
        root: StrPath,
        target_folders: Sequence[str] = DEFAULT_TARGET_FOLDERS,
        *,
        signal: CancellationSignal | None = None,
    ) -> WorkspaceReport:
        """Analyze a workspace's target folders with the session state."""
        return await analyze_workspace(
            root,
            target_folders,
            ignore=self._ignore,
            cache=self._cache,
            signal=signal,
            limiter=self.limiter,
            decimals=self.decimals,
        )

    async def largest_children(
        self,
        directory: StrPath,
        *,
        top: int = DEFAULT_TOP_CHILDREN,
    ) -> list[ChildSize]:
        """Rank the children of ``directory`` reusing the session cache."""
        return await largest_children(
            directory,
            top=top,
            ignore=self._ignore,
            cache=self._cache,
            limiter=self.limiter,
            decimals=self.decimals,
        )

    def invalidate(self, path: StrPath | None = None) -> None:
        """Invalidate cached sizes.

        Args:
            path: Changed path. Its own entry, its descendants and its
                ancestors are dropped so the next request re-walks the
                subtree and recomputes every enclosing total. With None, a
                new walk generation starts.
        """
        if path is None:
            self._generation += 1
            self._cache = {}
            self._in_flight = {}
            logger.debug("Size cache reset", extra={"generation": self._generation})
            return

        changed = PurePath(os.fspath(path))
        stale = [key for key in self._cache if _is_related(key, changed)]
        # Walks already running keep the old object and cannot restore stale totals
        self._cache = {key: size for key, size in self._cache.items() if not _is_related(key, changed)}

        for key in [key for key in self._in_flight if _is_related(key, changed)]:
            del self._in_flight[key]

        logger.debug(
            "Size cache invalidated",
            extra={"path": os.fspath(path), "entries_removed": len(stale)},
        )

    def set_ignore_patterns(self, patterns: Iterable[str]) -> None:
        """Replace the ignore patterns and start a new walk generation.

        Args:
            patterns: New glob patterns
        """
        self._ignore = IgnoreMatcher(patterns)
        self.invalidate()

    def cache_stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        return {
            "generation": self._generation,
            "cache_entries": len(self._cache),
            "in_flight": len(self._in_flight),
            "peak_in_flight_syscalls": self.limiter.peak,
        }
