"""Unit tests for ignore file handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from folder_size.core.data.filesystem.ignore_file import (
    DEFAULT_IGNORE_FILE,
    IGNORE_FILE_HEADER,
    load_effective_patterns,
    merge_patterns,
    read_ignore_file,
    top_level_directories,
    top_level_pattern,
    write_top_level_selection,
)


@pytest.mark.unit
class TestReadIgnoreFile:
    """Test reading ignore files."""

    def test_missing_file_yields_no_patterns(self, tmp_path: Path) -> None:
        """A missing ignore file is not an error."""
        assert read_ignore_file(tmp_path / DEFAULT_IGNORE_FILE) == []

    def test_comments_and_blank_lines_skipped(self, tmp_path: Path) -> None:
        """Only trimmed pattern lines are returned."""
        path = tmp_path / DEFAULT_IGNORE_FILE
        _ = path.write_text("# comment\n\n  /a/**  \n\t\n/b/*.log\n   # indented comment\n")

        assert read_ignore_file(path) == ["/a/**", "/b/*.log"]

    def test_undecodable_file_ignored(self, tmp_path: Path) -> None:
        """A file that is not UTF-8 is skipped with a warning."""
        path = tmp_path / DEFAULT_IGNORE_FILE
        _ = path.write_bytes(b"\xff\xfe\x00bad")

        assert read_ignore_file(path) == []

    def test_directory_instead_of_file_ignored(self, tmp_path: Path) -> None:
        """An unreadable ignore file path yields no patterns."""
        (tmp_path / DEFAULT_IGNORE_FILE).mkdir()

        assert read_ignore_file(tmp_path / DEFAULT_IGNORE_FILE) == []


@pytest.mark.unit
class TestMergePatterns:
    """Test pattern merging."""

    def test_order_preserving_deduplication(self) -> None:
        """First occurrences win and keep their position."""
        assert merge_patterns(["/a/**", "/b/**"], ["/b/**", "/c/**"], ["/a/**"]) == [
            "/a/**",
            "/b/**",
            "/c/**",
        ]

    def test_no_sources(self) -> None:
        """Merging nothing yields nothing."""
        assert merge_patterns() == []


@pytest.mark.unit
class TestLoadEffectivePatterns:
    """Test combining configured and file patterns."""

    def test_configured_first_then_file(self, tmp_path: Path) -> None:
        """Configured patterns come before new patterns from the file."""
        _ = (tmp_path / DEFAULT_IGNORE_FILE).write_text("/file/**\n/shared/**\n")

        patterns = load_effective_patterns(tmp_path, ["/config/**", "/shared/**"])

        assert patterns == ["/config/**", "/shared/**", "/file/**"]

    def test_custom_file_name(self, tmp_path: Path) -> None:
        """The ignore file name is configurable."""
        _ = (tmp_path / ".sizeignore").write_text("/custom/**\n")

        assert load_effective_patterns(tmp_path, ignore_file=".sizeignore") == ["/custom/**"]


@pytest.mark.unit
class TestTopLevelDirectories:
    """Test top-level directory discovery."""

    def test_lists_visible_directories_sorted(self, tmp_path: Path) -> None:
        """Only non-hidden directories are listed, sorted by name."""
        for name in ("zeta", "alpha", ".git", "mid"):
            (tmp_path / name).mkdir()
        _ = (tmp_path / "file.txt").write_text("x")

        assert top_level_directories(tmp_path) == ["alpha", "mid", "zeta"]

    def test_symlinked_directories_excluded(self, tmp_path: Path) -> None:
        """Links to directories are not offered."""
        (tmp_path / "real").mkdir()
        (tmp_path / "link").symlink_to(tmp_path / "real", target_is_directory=True)

        assert top_level_directories(tmp_path) == ["real"]

    def test_missing_root(self, tmp_path: Path) -> None:
        """A root that cannot be listed has no top-level directories."""
        assert top_level_directories(tmp_path / "missing") == []

    def test_top_level_pattern(self, tmp_path: Path) -> None:
        """The pattern covers the directory and everything below it."""
        assert top_level_pattern(tmp_path / "vendor") == f"{(tmp_path / 'vendor').as_posix()}/**"


@pytest.mark.unit
class TestWriteTopLevelSelection:
    """Test rewriting the ignore file's top-level selection."""

    @pytest.fixture
    def root(self, tmp_path: Path) -> Path:
        for name in ("node_modules", "vendor", "tmp"):
            (tmp_path / name).mkdir()
        return tmp_path

    def test_creates_file_with_header(self, root: Path) -> None:
        """A new ignore file starts with the header."""
        written = write_top_level_selection(root, ["vendor", "tmp"])

        lines = (root / DEFAULT_IGNORE_FILE).read_text().splitlines()
        assert lines[: len(IGNORE_FILE_HEADER) - 1] == list(IGNORE_FILE_HEADER[:-1])
        assert written == [top_level_pattern(root / "vendor"), top_level_pattern(root / "tmp")]
        assert lines[-2:] == written

    def test_selection_replaced_and_custom_lines_kept(self, root: Path) -> None:
        """Previous top-level patterns are replaced; other lines survive."""
        _ = write_top_level_selection(root, ["vendor"])
        path = root / DEFAULT_IGNORE_FILE
        _ = path.write_text(path.read_text() + "**/*.log\n")

        _ = write_top_level_selection(root, ["node_modules"])

        patterns = read_ignore_file(path)
        assert patterns == ["**/*.log", top_level_pattern(root / "node_modules")]

    def test_header_not_duplicated(self, root: Path) -> None:
        """Rewriting twice keeps a single header."""
        _ = write_top_level_selection(root, ["tmp"])
        _ = write_top_level_selection(root, ["tmp"])

        content = (root / DEFAULT_IGNORE_FILE).read_text()
        assert content.count(IGNORE_FILE_HEADER[0]) == 1

    def test_empty_selection_clears(self, root: Path) -> None:
        """Selecting nothing removes every top-level pattern."""
        _ = write_top_level_selection(root, ["vendor", "tmp"])

        assert write_top_level_selection(root, []) == []
        assert read_ignore_file(root / DEFAULT_IGNORE_FILE) == []

    def test_unknown_name_rejected(self, root: Path) -> None:
        """Names that are not top-level directories are invalid."""
        with pytest.raises(ValueError, match="missing"):
            _ = write_top_level_selection(root, ["vendor", "missing"])

        assert not (root / DEFAULT_IGNORE_FILE).exists()

    def test_written_patterns_ignore_the_folder(self, root: Path) -> None:
        """Patterns written for a folder are loaded back as effective patterns."""
        _ = write_top_level_selection(root, ["vendor"])

        assert load_effective_patterns(root) == [top_level_pattern(root / "vendor")]
