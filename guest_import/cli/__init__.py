"""Command-line entry point (python -m guest_import.cli)."""

from .__main__ import main

__all__ = ["main"]
