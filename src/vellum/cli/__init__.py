"""Command-line entry points."""

from .cli import main, render_cli

__all__ = ["main", "render_cli"]
