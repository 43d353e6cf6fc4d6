"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from folder_size.utils.logging import clear_correlation_id
from tests.fixtures.filesystem_trees import build_tree


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Tree totalling 2048 bytes: a/x (100), a/y (924), b (1024)."""
    root = tmp_path / "root"
    build_tree(root, {"a": {"x": 100, "y": 924}, "b": 1024})
    return root


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace with node_modules and dist folders but no build or cache."""
    root = tmp_path / "workspace"
    build_tree(
        root,
        {
            "node_modules": {"react": {"index.js": 3000}, "lodash": {"lodash.js": 1000}},
            "dist": {"bundle.js": 2048},
            "src": {"main.ts": 500},
            ".git": {"HEAD": 40},
        },
    )
    return root


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None]:
    """Restore root logger handlers and level replaced by configure_logging."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    clear_correlation_id()
