"""Command-line interface."""

from hnotify.cli.main import cli


__all__ = ["cli"]
