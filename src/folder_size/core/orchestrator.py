"""Batch orchestration of folder size analysis.

The orchestrator drives the size calculator over a list of independent roots
and turns each outcome into a FolderSizeResult. It is responsible for:

- Checking that each root exists before walking it
- Sharing one ignore matcher, cache and concurrency limiter across the batch
- Isolating per-root failures so one bad root never affects its siblings
- Honouring an advisory cancellation signal between roots
- Formatting sizes for display

Results always line up with the requested roots, one per root, in order.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from folder_size.core.data.filesystem import (
    ConcurrencyLimiter,
    IgnoreMatcher,
    SizeCalculator,
)
from folder_size.core.data.filesystem.limiter import DEFAULT_CONCURRENCY_LIMIT
from folder_size.types import (
    CancellationSignal,
    ChildSize,
    FolderSizeResult,
    PathSizeCache,
    StrPath,
    WorkspaceReport,
)
from folder_size.utils.formatting import ZERO_BYTES, format_bytes

__all__ = [
    "CANCELLED",
    "DEFAULT_TARGET_FOLDERS",
    "DEFAULT_TOP_CHILDREN",
    "FOLDER_NOT_FOUND",
    "analyze_folders",
    "analyze_workspace",
    "largest_children",
]

logger = logging.getLogger(__name__)

# Error markers distinguishable by the presentation layer
FOLDER_NOT_FOUND: Final[str] = "Folder not found"
CANCELLED: Final[str] = "Cancelled"

DEFAULT_TARGET_FOLDERS: Final[tuple[str, ...]] = ("node_modules", "dist", "build", "cache")
DEFAULT_TOP_CHILDREN: Final[int] = 15


def _error_result(path: str, error: str) -> FolderSizeResult:
    return FolderSizeResult(path=path, size=0, formatted_size=ZERO_BYTES, error=error)


async def analyze_folders(
    roots: Sequence[StrPath],
    *,
    ignore: IgnoreMatcher | Iterable[str] = (),
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    cache: PathSizeCache | None = None,
    signal: CancellationSignal | None = None,
    limiter: ConcurrencyLimiter | None = None,
    decimals: int = 2,
) -> list[FolderSizeResult]:
    """Compute the recursive size of each root.

    Roots are processed one after another; each root's walk is itself
    concurrent. Cancellation is checked before starting each root: roots not
    started because of it get a ``CANCELLED`` result, and a walk already in
    progress always runs to completion.

    Args:
        roots: Paths to analyze
        ignore: Ignore matcher or glob patterns shared by every walk
        concurrency_limit: Slots for a fresh limiter (ignored if limiter given)
        cache: Caller-owned size cache; a fresh one is used when None
        signal: Advisory cancellation signal
        limiter: Limiter to share with other batches or lazy requests
        decimals: Decimal places for formatted sizes

    Returns:
        One FolderSizeResult per root, in the same order as ``roots``

    Raises:
        ValueError: If concurrency_limit is lower than 1 and no limiter is given

    Examples:
        >>> results = await analyze_folders(["/work/app/node_modules"])
        >>> results[0].formatted_size
        '182.4 MB'
    """
    if limiter is None:
        limiter = ConcurrencyLimiter(concurrency_limit)
    if cache is None:
        cache = {}

    calculator = SizeCalculator(ignore=ignore, cache=cache, limiter=limiter)
    results: list[FolderSizeResult] = []
    started = time.perf_counter()

    for root in roots:
        path = os.fspath(root)

        if signal is not None and signal.is_set():
            logger.info("Analysis cancelled, root not started", extra={"root": path})
            results.append(_error_result(path, CANCELLED))
            continue

        results.append(await _analyze_root(path, calculator, decimals))

    logger.info(
        "Folder analysis complete",
        extra={
            "roots": len(results),
            "failed": sum(1 for result in results if result.error is not None),
            "cache_entries": len(cache),
            "peak_in_flight": limiter.peak,
            "elapsed_seconds": round(time.perf_counter() - started, 3),
        },
    )
    return results


async def _analyze_root(
    path: str,
    calculator: SizeCalculator,
    decimals: int,
) -> FolderSizeResult:
    """Check one root and walk it, converting every failure into a result."""
    try:
        _ = await calculator.limiter.run_in_thread(os.stat, path)
    except FileNotFoundError:
        logger.debug("Root does not exist", extra={"root": path})
        return _error_result(path, FOLDER_NOT_FOUND)
    # ValueError covers paths the OS cannot represent, such as embedded NUL bytes
    except (OSError, ValueError) as exc:
        logger.warning(
            "Cannot access root",
            extra={"root": path, "error": str(exc)},
        )
        return _error_result(path, str(exc))

    try:
        size = await calculator.calculate_size(path)
    except Exception as exc:
        logger.exception(
            "Unexpected error sizing root",
            extra={"root": path, "error": str(exc)},
        )
        return _error_result(path, str(exc))

    logger.debug("Root sized", extra={"root": path, "bytes": size})
    return FolderSizeResult(path=path, size=size, formatted_size=format_bytes(size, decimals))


async def analyze_workspace(
    root: StrPath,
    target_folders: Sequence[str] = DEFAULT_TARGET_FOLDERS,
    *,
    ignore: IgnoreMatcher | Iterable[str] = (),
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    cache: PathSizeCache | None = None,
    signal: CancellationSignal | None = None,
    limiter: ConcurrencyLimiter | None = None,
    decimals: int = 2,
) -> WorkspaceReport:
    """Analyze a workspace's target folders and total the successful results.

    Args:
        root: Workspace root directory
        target_folders: Folder names relative to root
        ignore: Ignore matcher or glob patterns
        concurrency_limit: Slots for a fresh limiter (ignored if limiter given)
        cache: Caller-owned size cache
        signal: Advisory cancellation signal
        limiter: Shared limiter
        decimals: Decimal places for formatted sizes

    Returns:
        WorkspaceReport with one result per target folder
    """
    root_path = Path(root)
    folders = [os.fspath(root_path / folder) for folder in target_folders]

    results = await analyze_folders(
        folders,
        ignore=ignore,
        concurrency_limit=concurrency_limit,
        cache=cache,
        signal=signal,
        limiter=limiter,
        decimals=decimals,
    )
    total = sum(result.size for result in results if result.error is None)

    return WorkspaceReport(
        root=os.fspath(root_path),
        results=results,
        total_size=total,
        formatted_total=format_bytes(total, decimals),
    )


async def largest_children(
    directory: StrPath,
    *,
    top: int = DEFAULT_TOP_CHILDREN,
    ignore: IgnoreMatcher | Iterable[str] = (),
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    cache: PathSizeCache | None = None,
    limiter: ConcurrencyLimiter | None = None,
    decimals: int = 2,
) -> list[ChildSize]:
    """Rank the immediate children of ``directory`` by size.

    Hidden children (names starting with ``.``) are skipped. Children already
    in the cache are not walked again.

    Args:
        directory: Directory whose children are ranked
        top: Maximum number of rows returned
        ignore: Ignore matcher or glob patterns
        concurrency_limit: Slots for a fresh limiter (ignored if limiter given)
        cache: Caller-owned size cache
        limiter: Shared limiter
        decimals: Decimal places for formatted sizes

    Returns:
        Children with a non-zero size, largest first, at most ``top`` rows

    Raises:
        OSError: If ``directory`` cannot be listed
    """
    if limiter is None:
        limiter = ConcurrencyLimiter(concurrency_limit)
    if cache is None:
        cache = {}

    base = os.fspath(directory)
    names = await limiter.run_in_thread(os.listdir, base)
    children = [os.path.join(base, name) for name in sorted(names) if not name.startswith(".")]

    pending = [child for child in children if child not in cache]
    if pending:
        results = await analyze_folders(
            pending,
            ignore=ignore,
            cache=cache,
            limiter=limiter,
            decimals=decimals,
        )
        for result in results:
            if result.error is not None:
                logger.debug(
                    "Child skipped from ranking",
                    extra={"path": result.path, "error": result.error},
                )

    ranked = sorted(
        (
            ChildSize(
                name=os.path.basename(child),
                path=child,
                size=cache.get(child, 0),
                formatted_size=format_bytes(cache.get(child, 0), decimals),
            )
            for child in children
        ),
        key=lambda row: row.size,
        reverse=True,
    )
    return [row for row in ranked if row.size > 0][:top]
