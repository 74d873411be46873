"""
Command-line interface for genmedia.

Commands are implemented with Click in genmedia.cli.commands and use only the
public API (from genmedia import ...).
"""

from genmedia.cli.commands import cli, main

__all__ = ["cli", "main"]
