"""Shared Rich display functions for plans, logs and staleness.

Provides reusable table builders and summary printers used by the
plan, run, undo and history commands.
"""

from rich.markup import escape
from rich.table import Table

from tidyctl.models.execution import EntryStatus, ExecutionLog, LogKind
from tidyctl.models.plan import ActionPlan, ActionType
from tidyctl.models.staleness import ScanStalenessState, StalenessLevel
from tidyctl.utils.formatting import console, format_timestamp, print_success

_ACTION_LABELS: dict[ActionType, str] = {
    ActionType.MOVE: "[action.move]move[/]",
    ActionType.COPY: "[action.copy]copy[/]",
    ActionType.DELETE: "[action.delete]delete[/]",
    ActionType.RENAME: "[action.rename]rename[/]",
    ActionType.SKIP: "[action.skip]skip[/]",
}

_STALENESS_LABELS: dict[StalenessLevel, str] = {
    StalenessLevel.FRESH: "[staleness.fresh]fresh[/]",
    StalenessLevel.POSSIBLY_STALE: "[staleness.possibly_stale]possibly stale[/]",
    StalenessLevel.STALE: "[staleness.stale]stale[/]",
}


def _relative(path: str | None, root: str | None) -> str:
    """Shorten a path to its part below root when possible."""
    if path is None:
        return ""
    if root and path.startswith(root.rstrip("/") + "/"):
        path = path[len(root.rstrip("/")) + 1 :]
    return escape(path)


def format_action(action_type: ActionType) -> str:
    """Format an action type with its theme style."""
    return _ACTION_LABELS[action_type]


def format_staleness(state: ScanStalenessState | None) -> str:
    """Format a staleness state as a short styled label."""
    if state is None:
        return "[muted]never scanned[/]"
    minutes = int(state.elapsed.total_seconds() // 60)
    return f"{_STALENESS_LABELS[state.level]} [muted]({minutes} min ago)[/]"


def create_plan_table(
    plan: ActionPlan,
    changes_only: bool = False,
    dry_run: bool = False,
) -> Table:
    """Create a Rich table displaying a plan.

    Args:
        plan: The plan to display.
        changes_only: Hide skip actions.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for plan display.
    """
    title = "Planned Actions (Dry Run)" if dry_run else "Planned Actions"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8)
    table.add_column("Entry", style="path", overflow="fold")
    table.add_column("Destination", overflow="fold")
    table.add_column("Reason", style="muted")

    for action in plan.actions:
        if changes_only and action.action_type == ActionType.SKIP:
            continue
        entry = _relative(action.source, plan.root)
        if action.target.is_directory:
            entry += "/"
        table.add_row(
            format_action(action.action_type),
            entry,
            _relative(action.destination, plan.root),
            escape(action.reason),
        )

    return table


def print_plan_summary(plan: ActionPlan) -> None:
    """Print the per-type action counts of a plan.

    Args:
        plan: The plan to summarize.
    """
    parts = [
        f"{format_action(action_type)} {plan.count(action_type)}"
        for action_type in ActionType
        if plan.count(action_type)
    ]
    if parts:
        console.print(f"\nSummary: {', '.join(parts)} [muted](of {len(plan)} entries)[/]")


def create_log_table(log: ExecutionLog, changes_only: bool = False) -> Table:
    """Create a Rich table displaying an execution or undo log.

    Args:
        log: The log to display.
        changes_only: Hide skipped entries.

    Returns:
        Rich Table configured for log display.
    """
    title = "Undo Results" if log.kind == LogKind.UNDO else "Results"
    if log.dry_run:
        title += " (Dry Run)"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=7, justify="center")
    table.add_column("Action", width=8)
    table.add_column("Entry", style="path", overflow="fold")
    table.add_column("Result", overflow="fold")

    for entry in log.entries:
        if changes_only and entry.status == EntryStatus.SKIPPED:
            continue
        if entry.status == EntryStatus.SUCCESS:
            status = "[success]OK[/]"
            result = _relative(entry.destination or entry.trash_path, log.root)
            if entry.message:
                result = f"{result} [muted]{escape(entry.message)}[/]".strip()
        elif entry.status == EntryStatus.SKIPPED:
            status = "[muted]SKIP[/]"
            result = f"[muted]{escape(entry.message or '')}[/]"
        else:
            status = "[error]FAIL[/]"
            result = f"[error]{escape(entry.message or 'Unknown error')}[/]"

        table.add_row(
            status,
            format_action(entry.action_type),
            _relative(entry.source, log.root),
            result,
        )

    return table


def print_log_summary(log: ExecutionLog) -> None:
    """Print the succeeded/skipped/failed counts of a log.

    Args:
        log: The log to summarize.
    """
    if log.failed == 0:
        verb = "reversed" if log.kind == LogKind.UNDO else "completed"
        print_success(f"{log.succeeded} action(s) {verb}, {log.skipped} skipped.")
    else:
        console.print(
            f"\n[success]{log.succeeded} succeeded[/], "
            f"[muted]{log.skipped} skipped[/], "
            f"[error]{log.failed} failed[/]"
        )


def create_history_table(logs: list[ExecutionLog], reversed_ids: set[str]) -> Table:
    """Create a Rich table listing logs from the history store.

    Args:
        logs: Logs, newest first.
        reversed_ids: IDs of logs that have already been undone.

    Returns:
        Rich Table configured for history display.
    """
    table = Table(
        title="Execution History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Finished", style="info")
    table.add_column("Kind")
    table.add_column("Root", style="path", overflow="fold")
    table.add_column("OK", justify="right", style="success")
    table.add_column("Skip", justify="right", style="muted")
    table.add_column("Fail", justify="right", style="error")
    table.add_column("Undo?")

    for log in logs:
        if log.kind == LogKind.UNDO:
            kind = f"undo of {(log.reverses or '')[:8]}"
            undo = "[muted]-[/]"
        else:
            kind = "dry-run" if log.dry_run else "execution"
            if log.id in reversed_ids:
                undo = "[muted]undone[/]"
            elif log.is_reversible:
                undo = "[success]Yes[/]"
            else:
                undo = "[muted]No[/]"

        table.add_row(
            log.id[:8],
            format_timestamp(log.finished),
            kind,
            escape(log.root or ""),
            str(log.succeeded),
            str(log.skipped),
            str(log.failed),
            undo,
        )

    return table
