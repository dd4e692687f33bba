"""CLI commands for tidyctl.

This package contains all subcommand implementations.
"""

from tidyctl.cli.commands import history, plan, rules, run, scan, status, undo

__all__ = ["history", "plan", "rules", "run", "scan", "status", "undo"]
