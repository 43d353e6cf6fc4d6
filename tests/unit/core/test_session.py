"""Unit tests for the workspace size session."""

import asyncio
import os
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from folder_size.core.orchestrator import FOLDER_NOT_FOUND
from folder_size.core.session import SizeSession


@pytest.mark.unit
class TestSessionState:
    """Test session construction and state accessors."""

    def test_defaults(self) -> None:
        """A new session starts empty at generation zero."""
        session = SizeSession()

        assert session.generation == 0
        assert session.cache == {}
        assert session.ignore_patterns == []
        assert session.limiter.limit == 8
        assert session.in_flight() == []

    def test_invalid_concurrency_limit(self) -> None:
        """A limit below one is rejected."""
        with pytest.raises(ValueError):
            _ = SizeSession(concurrency_limit=0)

    def test_is_ignored(self) -> None:
        """Session patterns decide which paths are ignored."""
        session = SizeSession(ignore_patterns=["/work/tmp/**"])

        assert session.is_ignored("/work/tmp/x") is True
        assert session.is_ignored("/work/src/x") is False


@pytest.mark.unit
class TestSizeRequests:
    """Test lazy per-path size requests."""

    @pytest.mark.asyncio
    async def test_size_of(self, sample_tree: Path) -> None:
        """Requesting a size walks the path and caches it."""
        session = SizeSession()

        assert await session.size_of(sample_tree) == 2048
        assert session.cached_size(sample_tree) == 2048
        assert session.cached_size(sample_tree / "a") == 1024

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_walk(self, sample_tree: Path) -> None:
        """The first requester starts the walk; later ones join it."""
        session = SizeSession()

        first = session.request_size(sample_tree)
        second = session.request_size(sample_tree)

        assert first is second
        assert session.in_flight() == [str(sample_tree)]
        assert await first == 2048
        assert session.in_flight() == []

    @pytest.mark.asyncio
    async def test_settled_request_starts_new_task(self, sample_tree: Path) -> None:
        """A new request after settlement gets a fresh task."""
        session = SizeSession()

        first = session.request_size(sample_tree)
        _ = await first
        second = session.request_size(sample_tree)

        assert second is not first
        assert await second == 2048

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_walk(self, sample_tree: Path) -> None:
        """Cancelling one waiter leaves the shared walk running."""
        session = SizeSession()

        waiter = asyncio.ensure_future(session.size_of(sample_tree))
        await asyncio.sleep(0)
        shared = session.request_size(sample_tree)
        _ = waiter.cancel()

        assert await shared == 2048
        with pytest.raises(asyncio.CancelledError):
            await waiter

    @pytest.mark.asyncio
    async def test_cached_size_skips_walk(self, sample_tree: Path) -> None:
        """A cached path is answered without a task."""
        session = SizeSession()
        _ = await session.size_of(sample_tree)

        with patch("folder_size.core.data.filesystem.size_calculator.os.lstat") as mock_lstat:
            assert await session.size_of(sample_tree) == 2048

        mock_lstat.assert_not_called()


@pytest.mark.unit
class TestSessionAnalysis:
    """Test batch operations run through the session."""

    @pytest.mark.asyncio
    async def test_analyze_uses_session_cache(self, sample_tree: Path) -> None:
        """Batch results populate the session cache."""
        session = SizeSession()

        results = await session.analyze([sample_tree])

        assert results[0].size == 2048
        assert session.cached_size(sample_tree / "b") == 1024

    @pytest.mark.asyncio
    async def test_analyze_applies_session_patterns(self, sample_tree: Path) -> None:
        """Session ignore patterns prune batch walks."""
        session = SizeSession(ignore_patterns=[f"{sample_tree.as_posix()}/a/**"])

        results = await session.analyze([sample_tree])

        assert results[0].size == 1024

    @pytest.mark.asyncio
    async def test_analyze_workspace(self, workspace: Path) -> None:
        """Workspace analysis totals the found targets."""
        session = SizeSession(decimals=1)

        report = await session.analyze_workspace(workspace, ["node_modules", "missing"])

        assert report.total_size == 4000
        assert report.formatted_total == "3.9 KB"
        assert report.results[1].error == FOLDER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_largest_children(self, workspace: Path) -> None:
        """Ranking reuses the session's cache."""
        session = SizeSession()
        _ = await session.size_of(workspace / "dist")

        rows = await session.largest_children(workspace, top=2)

        assert [row.name for row in rows] == ["node_modules", "dist"]
        assert session.cached_size(workspace / "src") == 500


@pytest.mark.unit
class TestInvalidation:
    """Test cache invalidation and walk generations."""

    @pytest.mark.asyncio
    async def test_invalidate_path_drops_ancestors_and_descendants(self, sample_tree: Path) -> None:
        """A changed path forces its subtree and enclosing totals to be recomputed."""
        session = SizeSession()
        _ = await session.size_of(sample_tree)

        session.invalidate(sample_tree / "a")

        assert session.cached_size(sample_tree / "a") is None
        assert session.cached_size(sample_tree / "a" / "x") is None
        assert session.cached_size(sample_tree) is None
        assert session.cached_size(sample_tree / "b") == 1024
        assert session.generation == 0

    @pytest.mark.asyncio
    async def test_invalidate_path_picks_up_changes(self, sample_tree: Path) -> None:
        """Sizes reflect filesystem changes after invalidation."""
        session = SizeSession()
        _ = await session.size_of(sample_tree)

        _ = (sample_tree / "a" / "z").write_bytes(b"x" * 1000)
        assert await session.size_of(sample_tree) == 2048

        session.invalidate(sample_tree / "a" / "z")
        assert await session.size_of(sample_tree) == 3048

    @pytest.mark.asyncio
    async def test_invalidate_sibling_prefix_untouched(self, tmp_path: Path) -> None:
        """Paths sharing a name prefix are not related."""
        (tmp_path / "app").mkdir()
        (tmp_path / "application").mkdir()
        session = SizeSession()
        _ = await session.size_of(tmp_path / "app")
        _ = await session.size_of(tmp_path / "application")

        session.invalidate(tmp_path / "app")

        assert session.cached_size(tmp_path / "application") == 0

    @pytest.mark.asyncio
    async def test_invalidate_all_starts_new_generation(self, sample_tree: Path) -> None:
        """Invalidating everything swaps in a fresh cache."""
        session = SizeSession()
        _ = await session.size_of(sample_tree)
        old_cache = session.cache

        session.invalidate()

        assert session.generation == 1
        assert session.cache == {}
        assert session.cache is not old_cache

    @pytest.mark.asyncio
    async def test_stale_walk_cannot_write_new_generation(self, sample_tree: Path) -> None:
        """A walk started before a reset writes only into the old cache."""
        session = SizeSession()

        stale = session.request_size(sample_tree)
        old_cache = session.cache
        session.invalidate()

        assert await stale == 2048
        assert old_cache[str(sample_tree)] == 2048
        assert session.cached_size(sample_tree) is None
        assert session.in_flight() == []

    @pytest.mark.asyncio
    async def test_path_change_during_walk_is_not_cached_stale(self, sample_tree: Path) -> None:
        """A walk that listed a directory before it changed cannot restore old totals."""
        session = SizeSession(concurrency_limit=1)
        changed_dir = str(sample_tree / "a")
        listed = threading.Event()
        release = threading.Event()
        real_listdir = os.listdir

        def listdir_pausing_on_changed_dir(path: str) -> list[str]:
            names = real_listdir(path)
            if path == changed_dir:
                listed.set()
                _ = release.wait(5)
            return names

        with patch(
            "folder_size.core.data.filesystem.size_calculator.os.listdir",
            side_effect=listdir_pausing_on_changed_dir,
        ):
            stale = session.request_size(sample_tree)
            assert await asyncio.to_thread(listed.wait, 5)

            _ = (sample_tree / "a" / "z").write_bytes(b"x" * 1000)
            session.invalidate(sample_tree / "a" / "z")
            release.set()

            assert await stale == 2048

        assert session.cached_size(sample_tree) is None
        assert session.cached_size(sample_tree / "a") is None
        assert await session.size_of(sample_tree) == 3048
        assert session.generation == 0

    @pytest.mark.asyncio
    async def test_stale_task_settling_keeps_new_registration(self, sample_tree: Path) -> None:
        """A settling stale task never removes a newer in-flight entry."""
        session = SizeSession()

        stale = session.request_size(sample_tree)
        session.invalidate()
        fresh = session.request_size(sample_tree)
        _ = await stale

        assert session.in_flight() in ([str(sample_tree)], [])
        assert await fresh == 2048
        assert session.cached_size(sample_tree) == 2048

    @pytest.mark.asyncio
    async def test_set_ignore_patterns(self, sample_tree: Path) -> None:
        """New patterns start a new generation and apply to later walks."""
        session = SizeSession()
        assert await session.size_of(sample_tree) == 2048

        session.set_ignore_patterns([f"{sample_tree.as_posix()}/b"])

        assert session.generation == 1
        assert session.ignore_patterns == [f"{sample_tree.as_posix()}/b"]
        assert await session.size_of(sample_tree) == 1024

    @pytest.mark.asyncio
    async def test_cache_stats(self, sample_tree: Path) -> None:
        """Stats report generation, entries and in-flight walks."""
        session = SizeSession(concurrency_limit=2)
        _ = await session.size_of(sample_tree)

        stats = session.cache_stats()

        assert stats["generation"] == 0
        assert stats["cache_entries"] == 5
        assert stats["in_flight"] == 0
        assert 1 <= stats["peak_in_flight_syscalls"] <= 2
        assert os.fspath(sample_tree) in session.cache
