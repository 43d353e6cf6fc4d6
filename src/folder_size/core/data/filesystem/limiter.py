"""Concurrency limiter for filesystem syscalls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Final

from folder_size.types.models import LimiterStats

DEFAULT_CONCURRENCY_LIMIT: Final[int] = 8


class ConcurrencyLimiter:
    """Counting semaphore bounding in-flight filesystem operations.

    Only the syscall-bearing steps of a walk (metadata reads and directory
    listings) pass through the limiter; the recursive fan-out between them
    does not. Excess submissions wait in FIFO order and are released as slots
    free up.

    The counters are only touched from the event loop thread, so no extra
    locking is needed around them.
    """

    def __init__(self, limit: int = DEFAULT_CONCURRENCY_LIMIT) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of operations running at once (>= 1)

        Raises:
            ValueError: If limit is lower than 1
        """
        if limit < 1:
            msg = f"concurrency limit must be at least 1, got: {limit}"
            raise ValueError(msg)

        self._limit: int = limit
        self._semaphore: asyncio.Semaphore = asyncio.Semaphore(limit)
        self._active: int = 0
        self._peak: int = 0
        self._completed: int = 0

    @property
    def limit(self) -> int:
        """Configured number of slots."""
        return self._limit

    @property
    def active(self) -> int:
        """Operations currently holding a slot."""
        return self._active

    @property
    def peak(self) -> int:
        """Highest number of operations that ever held a slot at once."""
        return self._peak

    async def with_slot[T](self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` once a slot is free and return its result.

        Args:
            operation: Zero-argument callable producing the awaitable to run

        Returns:
            Whatever the operation returns; exceptions propagate unchanged
        """
        async with self._semaphore:
            self._active += 1
            self._peak = max(self._peak, self._active)
            try:
                return await operation()
            finally:
                self._active -= 1
                self._completed += 1

    async def run_in_thread[**P, T](
        self,
        func: Callable[P, T],
        /,
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> T:
        """Run a blocking call in a worker thread under a limiter slot.

        Args:
            func: Blocking callable such as ``os.lstat``
            *args: Positional arguments for ``func``
            **kwargs: Keyword arguments for ``func``

        Returns:
            The value returned by ``func``
        """
        return await self.with_slot(lambda: asyncio.to_thread(func, *args, **kwargs))

    def stats(self) -> LimiterStats:
        """Get limiter statistics.

        Returns:
            Snapshot of limit, active, peak and completed operation counts
        """
        return LimiterStats(
            limit=self._limit,
            active=self._active,
            peak=self._peak,
            completed=self._completed,
        )

    def reset_stats(self) -> None:
        """Reset the peak and completed counters."""
        self._peak = self._active
        self._completed = 0
