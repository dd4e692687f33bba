"""Undo command for reverting an execution.

This module provides the `tidyctl undo` command for reversing the most
recent (or a chosen) execution recorded in the history.
"""

from typing import Annotated

import typer
from rich.markup import escape

from tidyctl.cli.display import create_log_table, format_action, print_log_summary
from tidyctl.cli.types import create_session, require_settings
from tidyctl.core.errors import TidyError
from tidyctl.core.state import StateManager
from tidyctl.models.execution import ExecutionLog
from tidyctl.utils.formatting import (
    console,
    format_timestamp,
    print_error,
    print_info,
    print_warning,
)

PREVIEW_LIMIT = 10


def undo_execution(
    log_id: Annotated[
        str | None,
        typer.Argument(help="ID (or ID prefix) of the execution to undo. Defaults to the latest."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be undone without executing.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Undo an execution.

    Moved and renamed entries go back to where they were, copies are
    removed and trashed entries are restored. Entries that cannot be
    reversed are reported; the rest are still undone.

    Examples:
        tidyctl undo              # Undo the latest execution
        tidyctl undo 3f2a9c1b     # Undo a specific execution
        tidyctl undo --dry-run    # Preview only
    """
    state = StateManager()

    if log_id is not None:
        log = state.get_log(log_id)
        if log is None:
            print_error(f"No execution found with ID: {log_id}")
            raise typer.Exit(code=1)
        if state.is_reversed(log.id):
            print_error(f"Execution {log.id[:8]} has already been undone.")
            raise typer.Exit(code=1)
    else:
        log = state.get_last_reversible()
        if log is None:
            print_info("No reversible executions in history.")
            return

    _show_undo_preview(log)

    if dry_run:
        print_info("Dry run: no changes made.")
        return

    if not yes and not typer.confirm("Do you want to undo this execution?"):
        print_info("Cancelled.")
        return

    settings = require_settings()
    try:
        with create_session(settings, []) as session:
            result = session.undo(log)
    except TidyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    try:
        state.record_log(result)
    except (OSError, RuntimeError) as e:
        print_warning(f"Failed to record history: {e}")

    console.print(create_log_table(result))
    print_log_summary(result)

    if result.has_failures:
        raise typer.Exit(code=1)


def _show_undo_preview(log: ExecutionLog) -> None:
    """Display what undoing a log will reverse.

    Args:
        log: The execution log to preview.
    """
    reversible = [entry for entry in reversed(log.entries) if entry.is_reversible]

    console.print(f"\n[bold]Undo execution {log.id[:8]}[/bold]")
    console.print(f"  Root: {escape(log.root or '-')}")
    console.print(f"  Date: {format_timestamp(log.finished)}")
    console.print(f"  Entries to reverse ({len(reversible)}):")
    for entry in reversible[:PREVIEW_LIMIT]:
        path = escape(entry.destination or entry.source)
        console.print(f"    - {format_action(entry.action_type)} {path}")
    if len(reversible) > PREVIEW_LIMIT:
        console.print(f"    ... and {len(reversible) - PREVIEW_LIMIT} more")
    console.print()
