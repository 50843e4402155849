"""Command-line interface for patchbridge."""

from patchbridge.cli.commands import main

__all__ = ["main"]
