"""Unit tests for cli/display.py.

Tests for the shared Rich display functions used by the plan, run,
undo, history and status commands.
"""

import io
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from rich.console import Console
from rich.table import Table
from tidyctl.cli.display import (
    create_history_table,
    create_log_table,
    create_plan_table,
    format_staleness,
    print_log_summary,
    print_plan_summary,
)
from tidyctl.core.theme import get_theme
from tidyctl.models.descriptor import FileDescriptor
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import NO_MATCHING_RULE, ActionPlan, ActionType, PlannedAction
from tidyctl.models.staleness import ScanStalenessState, StalenessLevel

Factory = Callable[..., FileDescriptor]

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plan(descriptor_factory: Factory) -> ActionPlan:
    """A plan with one move, one delete and one skip under /d."""
    return ActionPlan(
        actions=(
            PlannedAction(
                descriptor_factory("/d/a.pdf"),
                ActionType.MOVE,
                "PDFs",
                destination="/d/pdf/a.pdf",
            ),
            PlannedAction(
                descriptor_factory("/d/old", is_directory=True),
                ActionType.DELETE,
                "Old",
            ),
            PlannedAction(descriptor_factory("/d/c.txt"), ActionType.SKIP, NO_MATCHING_RULE),
        ),
        root="/d",
    )


@pytest.fixture
def log() -> ExecutionLog:
    """An execution log with one entry of each status."""
    return ExecutionLog(
        entries=(
            LogEntry("a1", ActionType.MOVE, "/d/a.pdf", EntryStatus.SUCCESS, "/d/pdf/a.pdf"),
            LogEntry("a2", ActionType.SKIP, "/d/c.txt", EntryStatus.SKIPPED, message="no rule"),
            LogEntry(
                "a3", ActionType.RENAME, "/d/b.txt", EntryStatus.FAILED, message="Permission denied"
            ),
        ),
        root="/d",
        id="log123456789",
    )


def _render(table: Table) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=200).print(table)
    return buf.getvalue()


def _capture_console_output(func: object, *args: object, **kwargs: object) -> str:
    """Capture Rich console output by temporarily replacing the console."""
    import tidyctl.cli.display as display_mod
    import tidyctl.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=200)

    original_display_console = display_mod.console
    original_fmt_console = fmt_mod.console
    display_mod.console = test_console
    fmt_mod.console = test_console
    try:
        func(*args, **kwargs)  # type: ignore[operator]
    finally:
        display_mod.console = original_display_console
        fmt_mod.console = original_fmt_console

    return buf.getvalue()


# ===========================================================================
# Plans
# ===========================================================================


class TestCreatePlanTable:
    """Tests for create_plan_table."""

    def test_columns(self, plan: ActionPlan) -> None:
        table = create_plan_table(plan)
        assert [col.header for col in table.columns] == [
            "Action",
            "Entry",
            "Destination",
            "Reason",
        ]

    def test_rows_relative_to_root(self, plan: ActionPlan) -> None:
        """Paths below the root are shown relative to it."""
        output = _render(create_plan_table(plan))

        assert "pdf/a.pdf" in output
        assert "/d/a.pdf" not in output
        assert "old/" in output
        assert NO_MATCHING_RULE in output

    def test_changes_only_hides_skips(self, plan: ActionPlan) -> None:
        assert create_plan_table(plan).row_count == 3
        assert create_plan_table(plan, changes_only=True).row_count == 2

    def test_titles(self, plan: ActionPlan) -> None:
        assert create_plan_table(plan).title == "Planned Actions"
        assert create_plan_table(plan, dry_run=True).title == "Planned Actions (Dry Run)"

    def test_markup_in_names_is_escaped(self, descriptor_factory: Factory) -> None:
        """Brackets in file names are shown literally."""
        plan = ActionPlan(
            actions=(
                PlannedAction(
                    descriptor_factory("/d/[bold]x.txt"), ActionType.SKIP, NO_MATCHING_RULE
                ),
            ),
            root="/d",
        )
        assert "[bold]x.txt" in _render(create_plan_table(plan))

    def test_summary(self, plan: ActionPlan) -> None:
        output = _capture_console_output(print_plan_summary, plan)
        assert "move 1" in output
        assert "delete 1" in output
        assert "skip 1" in output
        assert "of 3 entries" in output
        assert "copy" not in output


# ===========================================================================
# Logs
# ===========================================================================


class TestCreateLogTable:
    """Tests for create_log_table."""

    def test_statuses(self, log: ExecutionLog) -> None:
        output = _render(create_log_table(log))
        assert "OK" in output
        assert "SKIP" in output
        assert "FAIL" in output
        assert "Permission denied" in output

    def test_changes_only_hides_skipped(self, log: ExecutionLog) -> None:
        assert create_log_table(log, changes_only=True).row_count == 2

    def test_titles(self, log: ExecutionLog) -> None:
        assert create_log_table(log).title == "Results"
        undo = ExecutionLog(entries=(), kind=LogKind.UNDO, reverses=log.id)
        assert create_log_table(undo).title == "Undo Results"
        dry = ExecutionLog(entries=(), dry_run=True)
        assert create_log_table(dry).title == "Results (Dry Run)"

    def test_summary_with_failures(self, log: ExecutionLog) -> None:
        output = _capture_console_output(print_log_summary, log)
        assert "1 succeeded" in output
        assert "1 skipped" in output
        assert "1 failed" in output

    def test_summary_without_failures(self) -> None:
        log = ExecutionLog(
            entries=(LogEntry("a1", ActionType.MOVE, "/d/a", EntryStatus.SUCCESS, "/e/a"),)
        )
        output = _capture_console_output(print_log_summary, log)
        assert "1 action(s) completed, 0 skipped." in output


# ===========================================================================
# History
# ===========================================================================


class TestCreateHistoryTable:
    """Tests for create_history_table."""

    def test_kinds_and_undo_column(self) -> None:
        reversible = ExecutionLog(
            entries=(LogEntry("a1", ActionType.MOVE, "/d/a", EntryStatus.SUCCESS, "/e/a"),),
            id="rev000000000",
        )
        undone = ExecutionLog(
            entries=(LogEntry("a1", ActionType.MOVE, "/d/a", EntryStatus.SUCCESS, "/e/a"),),
            id="und000000000",
        )
        undo = ExecutionLog(entries=(), kind=LogKind.UNDO, reverses="und000000000")
        dry = ExecutionLog(entries=(), dry_run=True)

        output = _render(create_history_table([undo, reversible, undone, dry], {"und000000000"}))

        assert "undo of und00000" in output
        assert "Yes" in output
        assert "undone" in output
        assert "dry-run" in output

    def test_row_per_log(self, log: ExecutionLog) -> None:
        assert create_history_table([log, log], set()).row_count == 2


# ===========================================================================
# Staleness
# ===========================================================================


class TestFormatStaleness:
    """Tests for format_staleness."""

    def test_never_scanned(self) -> None:
        assert "never scanned" in format_staleness(None)

    @pytest.mark.parametrize(
        ("level", "label"),
        [
            (StalenessLevel.FRESH, "fresh"),
            (StalenessLevel.POSSIBLY_STALE, "possibly stale"),
            (StalenessLevel.STALE, "stale"),
        ],
    )
    def test_levels(self, level: StalenessLevel, label: str) -> None:
        state = ScanStalenessState(
            root="/d",
            last_scan=datetime(2026, 1, 1, tzinfo=UTC),
            level=level,
            elapsed=timedelta(minutes=7, seconds=30),
        )
        text = format_staleness(state)
        assert f"]{label}[/]" in text
        assert "(7 min ago)" in text
