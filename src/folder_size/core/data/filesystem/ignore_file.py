"""Ignore file loading and top-level selection management.

The ignore file holds one glob per line, matched against absolute paths.
Blank lines and lines starting with ``#`` are skipped.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from folder_size.types.aliases import StrPath

from .exclusions import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE: Final[str] = ".folder-size-ignore"

IGNORE_FILE_HEADER: Final[tuple[str, ...]] = (
    "# Folder Size Ignore File",
    "# Lines below are glob patterns matched against absolute paths",
    "# Top-level selections managed by: folder-size ignore",
    "",
)


def read_ignore_file(path: StrPath) -> list[str]:
    """Read glob patterns from an ignore file.

    Args:
        path: Ignore file path

    Returns:
        Trimmed pattern lines without blanks and comments; empty when the
        file is missing or unreadable
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "Cannot read ignore file, ignoring it",
            extra={"path": os.fspath(path), "error": str(exc)},
        )
        return []

    patterns: list[str] = []
    for line in content.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            patterns.append(stripped)
    return patterns


def merge_patterns(*sources: Iterable[str]) -> list[str]:
    """Merge pattern lists, dropping duplicates but keeping first-seen order.

    Examples:
        >>> merge_patterns(["/a/**", "/b/**"], ["/b/**", "/c/**"])
        ['/a/**', '/b/**', '/c/**']
    """
    return list(dict.fromkeys(pattern for source in sources for pattern in source))


def load_effective_patterns(
    root: StrPath,
    configured: Sequence[str] = (),
    ignore_file: str = DEFAULT_IGNORE_FILE,
) -> list[str]:
    """Combine configured patterns with those from the root's ignore file.

    Args:
        root: Workspace root holding the ignore file
        configured: Patterns from configuration or the command line
        ignore_file: Ignore file name relative to root

    Returns:
        Configured patterns followed by new patterns from the file
    """
    file_patterns = read_ignore_file(Path(root) / ignore_file)
    patterns = merge_patterns(configured, file_patterns)
    logger.debug(
        "Ignore patterns loaded",
        extra={
            "configured": len(configured),
            "from_file": len(file_patterns),
            "effective": len(patterns),
        },
    )
    return patterns


def top_level_directories(root: StrPath) -> list[str]:
    """List the non-hidden directories directly under ``root``.

    Args:
        root: Workspace root

    Returns:
        Sorted directory names; empty if root cannot be listed
    """
    try:
        with os.scandir(root) as entries:
            return sorted(
                entry.name
                for entry in entries
                if not entry.name.startswith(".") and entry.is_dir(follow_symlinks=False)
            )
    except OSError as exc:
        logger.warning(
            "Cannot list workspace root",
            extra={"path": os.fspath(root), "error": str(exc)},
        )
        return []


def top_level_pattern(directory: StrPath) -> str:
    """Return the absolute pattern ignoring ``directory`` and its subtree.

    Examples:
        >>> top_level_pattern("/work/project/node_modules")
        '/work/project/node_modules/**'
    """
    return f"{normalize_path(directory)}/**"


def write_top_level_selection(
    root: StrPath,
    selected: Iterable[str],
    ignore_file: str = DEFAULT_IGNORE_FILE,
) -> list[str]:
    """Rewrite the ignore file so exactly ``selected`` top-level folders are ignored.

    Lines that are not top-level patterns are kept; header lines are
    rewritten rather than duplicated.

    Args:
        root: Workspace root holding the ignore file
        selected: Names of top-level directories to ignore
        ignore_file: Ignore file name relative to root

    Returns:
        The patterns written for the selected directories

    Raises:
        ValueError: If a selected name is not a top-level directory of root
        OSError: If the ignore file cannot be written
    """
    root_path = Path(root)
    available = top_level_directories(root_path)

    chosen = list(dict.fromkeys(selected))
    unknown = sorted(set(chosen) - set(available))
    if unknown:
        msg = f"Not top-level directories of {root_path}: {', '.join(unknown)}"
        raise ValueError(msg)

    top_patterns = {top_level_pattern(root_path / name) for name in available}
    selected_patterns = [top_level_pattern(root_path / name) for name in chosen]

    file_path = root_path / ignore_file
    try:
        existing = file_path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        existing = []

    retained = [
        line.strip()
        for line in existing
        if line.strip()
        and line.strip() not in top_patterns
        and line.strip() not in IGNORE_FILE_HEADER
    ]

    lines = [*IGNORE_FILE_HEADER, *retained, *selected_patterns]
    _ = file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    logger.info(
        "Ignore file updated",
        extra={"path": str(file_path), "selected": chosen, "retained": len(retained)},
    )
    return selected_patterns
