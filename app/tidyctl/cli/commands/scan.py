"""Scan command implementation.

Lists the entries of a directory tree as the planner will see them.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from tidyctl.cli.types import (
    OutputFormat,
    RootArgument,
    create_session,
    remember_scan,
    require_settings,
)
from tidyctl.core.errors import TidyError
from tidyctl.models.scan_result import ScanResult
from tidyctl.utils.formatting import (
    console,
    create_file_table,
    format_file_row,
    format_size,
    print_error,
    print_info,
)


def scan_directory(
    root: RootArgument,
    count_only: Annotated[
        bool,
        typer.Option(
            "--count",
            "-c",
            help="Only show entry counts.",
        ),
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-n",
            help="Limit number of entries to display.",
        ),
    ] = None,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export scan results to JSON file.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan a directory and display its entries.

    The scan time is remembered so 'tidyctl status' can tell whether
    later plans still reflect the directory.

    Examples:
        tidyctl scan ~/Downloads                  # Show table
        tidyctl scan ~/Downloads --count          # Counts only
        tidyctl scan ~/Downloads --format json    # Output as JSON
        tidyctl scan ~/Downloads -e scan.json     # Export to JSON file
    """
    settings = require_settings()
    try:
        with create_session(settings, []) as session:
            result = session.scan(root)
    except TidyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    remember_scan(result)

    if export_path is not None:
        _export_results(result, export_path)

    if count_only:
        print_info(f"Total entries: {len(result)}")
        console.print(f"  Files: {result.file_count}")
        console.print(f"  Directories: {result.directory_count}")
        console.print(f"  Size: {format_size(result.total_size)}")
        return

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
        return

    _print_table(result, limit)


def _print_table(result: ScanResult, limit: int | None) -> None:
    """Print scan results as a Rich table with a summary line."""
    entries = result.files[:limit] if limit else result.files

    table = create_file_table(f"Entries in {escape(result.root)}")
    for descriptor in entries:
        table.add_row(*format_file_row(descriptor, result.root))
    console.print(table)

    summary = (
        f"Showing {len(entries)} of {len(result)} entries "
        f"({result.file_count} files, {result.directory_count} directories, "
        f"{format_size(result.total_size)})"
    )
    if limit and len(entries) < len(result):
        summary += f" (limited to {limit})"
    console.print(f"\n[dim]{summary}[/]")


def _export_results(result: ScanResult, export_path: Path) -> None:
    """Write the full scan result to a JSON file.

    Raises:
        typer.Exit: If the file cannot be written.
    """
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)

    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(result.to_dict(), indent=2))
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e
    print_info(f"Scan results exported to {export_path}")
