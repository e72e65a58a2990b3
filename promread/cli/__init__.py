"""CLI module for promread."""

from promread.cli.main import app

__all__ = ["app"]
