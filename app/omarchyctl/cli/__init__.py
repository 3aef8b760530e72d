"""CLI package for omarchyctl.

This package contains the Typer application and all subcommands.
"""

from omarchyctl.cli.main import app

__all__ = ["app"]
