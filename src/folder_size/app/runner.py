"""Application runner for folder-size.

The runner owns one command invocation: it loads configuration, sets up
logging and the run's correlation ID, builds the workspace session and drives
it on a fresh event loop. SIGINT and SIGTERM set the cancellation signal so
the batch stops starting new roots while the walk in progress finishes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from folder_size.core.config import ApplicationConfig, MainConfig, load_main_config
from folder_size.core.data.filesystem.ignore_file import (
    load_effective_patterns,
    top_level_directories,
    write_top_level_selection,
)
from folder_size.core.session import SizeSession
from folder_size.types import ChildSize, WorkspaceReport
from folder_size.utils.formatting import format_bytes, format_duration
from folder_size.utils.logging import (
    configure_logging,
    generate_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


class ApplicationRunner:
    """Main application runner that coordinates all components."""

    def __init__(
        self,
        config_path: Path | None = None,
        log_level: str | None = None,
        enable_syslog: bool = True,
    ) -> None:
        """Initialize the application runner.

        Args:
            config_path: Path to the configuration file (defaults apply when None)
            log_level: Override for the configured logging level
            enable_syslog: Allow syslog output when the configuration enables it
        """
        self.config_path: Path | None = config_path
        self.log_level: str | None = log_level
        self.enable_syslog: bool = enable_syslog
        self._config: MainConfig | None = None

    @property
    def config(self) -> MainConfig:
        """Loaded configuration, read on first access.

        Raises:
            ConfigurationError: If the configuration file cannot be loaded
        """
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> MainConfig:
        config = load_main_config(self.config_path) if self.config_path is not None else MainConfig()

        if self.log_level is not None:
            config = config.model_copy(
                update={
                    "application": ApplicationConfig(
                        log_level=self.log_level,
                        syslog_enabled=config.application.syslog_enabled,
                    )
                }
            )

        configure_logging(
            log_level=config.application.log_level,
            enable_syslog=self.enable_syslog and config.application.syslog_enabled,
            enable_console=True,
        )
        set_correlation_id(generate_correlation_id())

        logger.debug(
            "Configuration loaded",
            extra={"config_path": str(self.config_path) if self.config_path else None},
        )
        return config

    def build_session(
        self,
        workspace: Path,
        extra_patterns: Sequence[str] = (),
        concurrency: int | None = None,
    ) -> SizeSession:
        """Build the size session for ``workspace``.

        Args:
            workspace: Workspace root holding the ignore file
            extra_patterns: Ignore patterns added on the command line
            concurrency: Override for the configured concurrency limit

        Returns:
            Session with the effective ignore patterns
        """
        analysis = self.config.analysis
        patterns = load_effective_patterns(
            workspace,
            [*analysis.ignore_patterns, *extra_patterns],
            analysis.ignore_file,
        )
        return SizeSession(
            ignore_patterns=patterns,
            concurrency_limit=concurrency if concurrency is not None else analysis.concurrency_limit,
            decimals=analysis.decimals,
        )

    def analyze(
        self,
        paths: Sequence[Path],
        *,
        workspace: Path,
        extra_patterns: Sequence[str] = (),
        concurrency: int | None = None,
    ) -> WorkspaceReport:
        """Size explicit paths, or the workspace's target folders when none are given.

        Args:
            paths: Explicit roots to size
            workspace: Workspace root
            extra_patterns: Ignore patterns added on the command line
            concurrency: Override for the configured concurrency limit

        Returns:
            Report with one result per root and the total of successful roots
        """
        session = self.build_session(workspace, extra_patterns, concurrency)
        started = time.perf_counter()

        async def run(cancel: asyncio.Event) -> WorkspaceReport:
            if not paths:
                return await session.analyze_workspace(
                    workspace,
                    self.config.analysis.target_folders,
                    signal=cancel,
                )
            results = await session.analyze([os.fspath(path) for path in paths], signal=cancel)
            total = sum(result.size for result in results if result.ok)
            return WorkspaceReport(
                root=os.fspath(workspace),
                results=results,
                total_size=total,
                formatted_total=format_bytes(total, session.decimals),
            )

        report = asyncio.run(_with_cancellation(run))
        logger.info(
            "Analysis finished",
            extra={
                "workspace": os.fspath(workspace),
                "total_bytes": report.total_size,
                "elapsed": format_duration(time.perf_counter() - started),
                **session.cache_stats(),
            },
        )
        return report

    def largest_children(
        self,
        directory: Path,
        *,
        workspace: Path | None = None,
        limit: int | None = None,
        extra_patterns: Sequence[str] = (),
    ) -> list[ChildSize]:
        """Rank the immediate children of ``directory`` by size.

        The ignore file is read from ``workspace``, which defaults to
        ``directory`` itself.

        Raises:
            OSError: If ``directory`` cannot be listed
        """
        session = self.build_session(workspace if workspace is not None else directory, extra_patterns)
        top = limit if limit is not None else self.config.analysis.top_children
        return asyncio.run(session.largest_children(directory, top=top))

    def available_top_level(self, root: Path) -> list[str]:
        """Names that ``update_ignore_file`` accepts for ``root``."""
        return top_level_directories(root)

    def update_ignore_file(self, root: Path, names: Sequence[str]) -> list[str]:
        """Rewrite the root's ignore file so exactly ``names`` are ignored.

        Raises:
            ValueError: If a name is not a top-level directory of root
            OSError: If the ignore file cannot be written
        """
        return write_top_level_selection(root, names, self.config.analysis.ignore_file)


async def _with_cancellation[T](run: Callable[[asyncio.Event], Awaitable[T]]) -> T:
    """Run ``run`` with an event that SIGINT and SIGTERM set."""
    cancel = asyncio.Event()

    def request_cancel() -> None:
        if not cancel.is_set():
            logger.info("Cancellation requested, finishing the current root")
            cancel.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, request_cancel)

    try:
        return await run(cancel)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            _ = loop.remove_signal_handler(sig)
