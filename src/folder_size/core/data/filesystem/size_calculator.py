"""Recursive size calculation with ignore patterns and a shared cache."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from collections.abc import Iterable

from folder_size.types.aliases import PathSizeCache, StrPath

from .exclusions import IgnoreMatcher
from .limiter import ConcurrencyLimiter

logger = logging.getLogger(__name__)


class SizeCalculator:
    """Calculator for the recursive byte size of filesystem entries.

    Provides size calculation with:
    - Per-path memoization in a caller-owned cache
    - Subtree pruning for paths matching ignore patterns
    - Symlinks sized as zero (never followed, so cycles are impossible)
    - Concurrent child walks with limiter-gated syscalls
    - Local, non-fatal handling of entries that cannot be read
    """

    def __init__(
        self,
        *,
        ignore: IgnoreMatcher | Iterable[str] | None = None,
        cache: PathSizeCache | None = None,
        limiter: ConcurrencyLimiter | None = None,
    ) -> None:
        """Initialize the size calculator.

        Args:
            ignore: Ignore matcher or glob patterns pruning matching subtrees
            cache: Mapping of already computed sizes, shared by reference
            limiter: Limiter gating lstat and listing syscalls
        """
        if ignore is None:
            ignore = IgnoreMatcher()
        elif not isinstance(ignore, IgnoreMatcher):
            ignore = IgnoreMatcher(ignore)

        self.ignore: IgnoreMatcher = ignore
        self.cache: PathSizeCache = cache if cache is not None else {}
        self.limiter: ConcurrencyLimiter = limiter or ConcurrencyLimiter()

    async def calculate_size(self, path: StrPath) -> int:
        """Calculate the total size of a file or directory tree.

        Failures below this call are swallowed: an entry that cannot be read
        contributes 0 and never aborts its siblings.

        Args:
            path: Path to calculate size for

        Returns:
            Total size in bytes
        """
        key = os.fspath(path)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if self.ignore.should_ignore(key):
            logger.debug("Path ignored", extra={"path": key})
            self.cache[key] = 0
            return 0

        try:
            stat_result = await self.limiter.run_in_thread(os.lstat, key)
        except (OSError, ValueError) as exc:
            logger.debug(
                "Cannot stat path, counting as zero",
                extra={"path": key, "error": str(exc)},
            )
            self.cache[key] = 0
            return 0

        mode = stat_result.st_mode

        if stat.S_ISLNK(mode):
            self.cache[key] = 0
            return 0

        if stat.S_ISREG(mode):
            self.cache[key] = stat_result.st_size
            return stat_result.st_size

        if stat.S_ISDIR(mode):
            total = await self._calculate_directory_size(key)
            self.cache[key] = total
            return total

        # Devices, sockets, fifos
        return 0

    async def _calculate_directory_size(self, path: str) -> int:
        """Sum the sizes of a directory's children, walked concurrently.

        Args:
            path: Directory path

        Returns:
            Total size of all children in bytes (0 if listing fails)
        """
        try:
            names = await self.limiter.run_in_thread(os.listdir, path)
        except (OSError, ValueError) as exc:
            logger.debug(
                "Cannot list directory, counting as zero",
                extra={"path": path, "error": str(exc)},
            )
            return 0

        # Child walks are not limiter-gated themselves; only their syscalls are
        sizes = await asyncio.gather(
            *(self.calculate_size(os.path.join(path, name)) for name in names)
        )
        return sum(sizes)

    def get_cache_stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        return {
            "cache_entries": len(self.cache),
            "zero_entries": sum(1 for size in self.cache.values() if size == 0),
        }


async def compute_size(
    path: StrPath,
    ignore_patterns: IgnoreMatcher | Iterable[str],
    cache: PathSizeCache,
    limiter: ConcurrencyLimiter,
) -> int:
    """Compute the recursive size of ``path``.

    Functional entry point over SizeCalculator; the cache and limiter are
    shared with the caller.

    Args:
        path: Path to size
        ignore_patterns: Ignore matcher or glob patterns
        cache: Size cache, read and written in place
        limiter: Limiter gating the walk's syscalls

    Returns:
        Total size in bytes
    """
    calculator = SizeCalculator(ignore=ignore_patterns, cache=cache, limiter=limiter)
    return await calculator.calculate_size(path)
