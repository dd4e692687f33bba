"""History command for viewing past executions.

This module provides the `tidyctl history` command for listing recorded
execution and undo logs, and for showing one log in full.
"""

import json
from datetime import UTC, datetime
from typing import Annotated

import typer

from tidyctl.cli.display import create_history_table, create_log_table, print_log_summary
from tidyctl.core.state import StateManager
from tidyctl.models.execution import ExecutionLog
from tidyctl.utils.formatting import console, print_error, print_info


def show_history(
    log_id: Annotated[
        str | None,
        typer.Argument(help="Show the full log with this ID (or ID prefix)."),
    ] = None,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since date (YYYY-MM-DD).",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show recorded executions and undos.

    Examples:
        tidyctl history                   # Show last 20 entries
        tidyctl history -n 50             # Show last 50 entries
        tidyctl history --since 2026-01-01
        tidyctl history 3f2a9c1b          # Full log of one execution
        tidyctl history --json            # JSON output for scripting
    """
    state = StateManager()

    if log_id is not None:
        log = state.get_log(log_id)
        if log is None:
            print_error(f"No log found with ID: {log_id}")
            raise typer.Exit(code=1)
        if json_output:
            console.print_json(json.dumps(log.to_dict()))
            return
        console.print(create_log_table(log))
        print_log_summary(log)
        return

    logs = state.get_history()

    if since:
        try:
            since_date = datetime.fromisoformat(since)
        except ValueError:
            print_error(f"Invalid date format: {since}. Use YYYY-MM-DD.")
            raise typer.Exit(code=1) from None
        if since_date.tzinfo is None:
            since_date = since_date.replace(tzinfo=UTC)
        logs = [log for log in logs if log.finished >= since_date]

    logs = logs[:limit]

    if not logs:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(logs)
    else:
        console.print(create_history_table(logs, state.get_reversed_ids()))


def _print_json(logs: list[ExecutionLog]) -> None:
    """Print logs as JSON for scripting."""
    console.print_json(json.dumps([log.to_dict() for log in logs]))
