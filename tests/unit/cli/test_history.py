"""Unit tests for history command."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from tidyctl.cli.main import app
from tidyctl.core.state import StateManager
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import ActionType
from typer.testing import CliRunner

runner = CliRunner()


def _log(log_id: str, day: int, **kwargs: object) -> ExecutionLog:
    moment = datetime(2026, 1, day, 12, 0, tzinfo=UTC)
    return ExecutionLog(
        entries=(
            LogEntry("a1", ActionType.MOVE, "/d/a.pdf", EntryStatus.SUCCESS, "/e/a.pdf"),
        ),
        root="/d",
        started=moment,
        finished=moment,
        id=log_id,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def recorded(xdg_home: Path) -> StateManager:
    """History with two executions, the second of them undone."""
    state = StateManager()
    state.record_log(_log("aaa111111111", 10))
    state.record_log(_log("bbb222222222", 12))
    state.record_log(_log("ccc333333333", 13, kind=LogKind.UNDO, reverses="bbb222222222"))
    return state


class TestHistoryCommand:
    """Tests for tidyctl history command."""

    def test_empty_history(self, xdg_home: Path) -> None:
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found." in result.stdout

    def test_lists_newest_first(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        output = result.stdout
        assert output.index("ccc33333") < output.index("bbb22222") < output.index("aaa11111")
        assert "undone" in output

    def test_limit(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "-n", "1"])

        assert "ccc33333" in result.stdout
        assert "aaa11111" not in result.stdout

    def test_since(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "--since", "2026-01-11", "--json"])

        assert result.exit_code == 0
        assert [log["id"] for log in json.loads(result.stdout)] == [
            "ccc333333333",
            "bbb222222222",
        ]

    def test_since_invalid(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "--since", "last week"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_json(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "--json"])

        data = json.loads(result.stdout)
        assert len(data) == 3
        assert data[0]["kind"] == "undo"
        assert data[0]["reverses"] == "bbb222222222"

    def test_show_single_log(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "aaa"])

        assert result.exit_code == 0
        assert "Results" in result.stdout
        assert "a.pdf" in result.stdout

    def test_show_single_log_json(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "aaa111111111", "--json"])

        assert json.loads(result.stdout)["id"] == "aaa111111111"

    def test_unknown_log(self, recorded: StateManager) -> None:
        result = runner.invoke(app, ["history", "zzz"])

        assert result.exit_code == 1
        assert "No log found with ID: zzz" in result.output
