"""Command line interface."""

from tinytype.cli.app import app, main

__all__ = ["app", "main"]
