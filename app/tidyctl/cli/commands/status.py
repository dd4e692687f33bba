"""Status command implementation.

Reports whether the last scan of each directory still reflects it.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from tidyctl.cli.display import format_staleness
from tidyctl.cli.types import create_tracker, require_settings
from tidyctl.core.paths import normalize_root
from tidyctl.core.state import StateManager
from tidyctl.utils.formatting import console, format_timestamp, print_info


def show_status(
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to check. Defaults to every scanned directory."),
    ] = None,
) -> None:
    """Show how fresh the last scan of a directory is.

    A scan is stale once the directory changed after it or it is older
    than the configured stale threshold. Rescan stale directories
    before running rules against them.

    Examples:
        tidyctl status                # Every scanned directory
        tidyctl status ~/Downloads    # One directory
    """
    settings = require_settings()
    tracker = create_tracker(settings)
    state = StateManager()

    if root is not None:
        path = normalize_root(root)
        tracker.register_root(path)
        completed = state.get_last_scan(path)
        last_scans = {path: completed} if completed is not None else {}
        roots = [path]
    else:
        last_scans = state.get_last_scans()
        roots = sorted(last_scans)

    if not roots:
        print_info("No directories scanned yet. Run 'tidyctl scan DIR' first.")
        return

    for path, completed in last_scans.items():
        tracker.mark_scan_completed(path, completed)

    table = Table(
        title="Scan Status",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Directory", style="path", overflow="fold")
    table.add_column("Last scan", style="info")
    table.add_column("State")

    for path in roots:
        last_scan = tracker.last_scan(path)
        table.add_row(
            escape(path),
            format_timestamp(last_scan) if last_scan is not None else "-",
            format_staleness(tracker.staleness(path)),
        )

    console.print(table)
