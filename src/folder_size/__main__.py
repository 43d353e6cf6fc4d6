"""Application entry point for folder-size.

Allows running the command line as ``python -m folder_size``.
"""

from __future__ import annotations

from folder_size.app.cli import cli

__all__ = ["main"]


def main() -> None:
    """Main entry point for folder-size application."""
    cli(prog_name="folder-size")


if __name__ == "__main__":
    main()
