"""CLI package for tidyctl.

This package contains the Typer application and all subcommands.
"""

from tidyctl.cli.main import app

__all__ = ["app"]
