"""Application module for folder-size."""

from __future__ import annotations

from folder_size.app.cli import cli
from folder_size.app.runner import ApplicationRunner

__all__ = [
    "cli",
    "ApplicationRunner",
]
