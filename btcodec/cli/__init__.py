"""Command-line interface for btcodec."""

from btcodec.cli.main import cli, main

__all__ = ["cli", "main"]
