"""Shared types and utilities for CLI commands.

This module provides the common argument types and the helpers that
turn user configuration into engine objects, so every command wires
the engine the same way.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from tidyctl.core.executor import ExecutionEngine
from tidyctl.core.planner import Planner
from tidyctl.core.rules import RulesError, load_rules
from tidyctl.core.scanner import DirectoryScanner
from tidyctl.core.session import OrganizerSession
from tidyctl.core.settings import Settings, SettingsError, load_settings
from tidyctl.core.staleness import StalenessTracker
from tidyctl.core.state import StateManager
from tidyctl.core.trash import Trash
from tidyctl.core.undo import UndoEngine
from tidyctl.models.rule import Rule
from tidyctl.models.scan_result import ScanResult
from tidyctl.utils.formatting import print_error, print_info, print_warning


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


RootArgument = Annotated[
    Path,
    typer.Argument(
        help="Directory to organize.",
        file_okay=False,
        dir_okay=True,
    ),
]


def require_settings() -> Settings:
    """Load settings or exit with an error message.

    Raises:
        typer.Exit: If the settings file is invalid.
    """
    try:
        return load_settings()
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def require_rules() -> list[Rule]:
    """Load the rule list or exit with an error message.

    A missing rules file yields an empty list.

    Raises:
        typer.Exit: If the rules file is invalid.
    """
    try:
        return load_rules(missing_ok=True)
    except RulesError as e:
        print_error(f"Failed to load rules: {e}")
        raise typer.Exit(code=1) from e


def warn_if_no_rules(rules: list[Rule]) -> None:
    """Tell the user how to add rules when none are enabled."""
    if not any(rule.enabled for rule in rules):
        print_warning("No enabled rules: every entry will be skipped.")
        print_info("Add one with 'tidyctl rules add'.")


def remember_scan(result: ScanResult) -> None:
    """Record the scan time for 'tidyctl status', warning on failure."""
    try:
        StateManager().record_scan(result)
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record scan time: {e}")


def create_tracker(settings: Settings) -> StalenessTracker:
    """Create a staleness tracker using the configured thresholds."""
    return StalenessTracker(
        fresh_threshold=settings.fresh_threshold,
        stale_threshold=settings.stale_threshold,
    )


def create_session(
    settings: Settings,
    rules: list[Rule],
    *,
    dry_run: bool = False,
) -> OrganizerSession:
    """Create an OrganizerSession wired from settings.

    Args:
        settings: Loaded user settings.
        rules: Rules in evaluation order.
        dry_run: Simulate executions without touching the filesystem.

    Returns:
        A new session; the caller must close it.
    """
    trash = Trash(settings.trash_path)
    return OrganizerSession(
        rules,
        scanner=DirectoryScanner(include_hidden=settings.include_hidden),
        planner=Planner(directory_policy=settings.directory_policy),
        executor=ExecutionEngine(trash=trash, dry_run=dry_run),
        undo_engine=UndoEngine(trash=trash),
        tracker=create_tracker(settings),
    )
