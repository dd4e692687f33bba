"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tidyctl.core.theme import get_theme

if TYPE_CHECKING:
    from tidyctl.models.descriptor import FileDescriptor


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format a byte count for humans, e.g. ``1.5 MB``.

    Args:
        size_bytes: Size in bytes, or None for directories.

    Returns:
        Human-readable size, "-" for None.
    """
    if size_bytes is None:
        return "-"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size_bytes} B"


def format_timestamp(value: datetime) -> str:
    """Format a timestamp in local time as YYYY-MM-DD HH:MM."""
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def create_file_table(title: str = "Scanned Entries") -> Table:
    """Create a pre-configured table for displaying scanned entries.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for entry display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Path", style="path", overflow="fold")
    table.add_column("Ext", style="muted")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Modified", style="muted")
    return table


def format_file_row(descriptor: FileDescriptor, root: str) -> tuple[str, str, str, str, str]:
    """Format a descriptor as a table row.

    Args:
        descriptor: The entry to format.
        root: Scan root; paths are shown relative to it.

    Returns:
        Tuple of (icon, path, extension, size, modified) with Rich markup.
    """
    relative = escape(descriptor.path[len(root) :].lstrip("/") or descriptor.name)
    if descriptor.is_directory:
        icon = "[header]■[/]"
        relative = f"[bold]{relative}/[/]"
    else:
        icon = "[muted]□[/]"

    return (
        icon,
        relative,
        descriptor.extension or "-",
        format_size(descriptor.size_bytes),
        format_timestamp(descriptor.modified),
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
