"""Unit tests for StateManager.

Tests for the StateManager class that handles history persistence and
scan records.
"""

import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from tidyctl.core.state import StateManager
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import ActionType
from tidyctl.models.scan_result import ScanResult

BASE = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def _log(
    log_id: str,
    *,
    minutes: int = 0,
    status: EntryStatus = EntryStatus.SUCCESS,
    kind: LogKind = LogKind.EXECUTION,
    reverses: str | None = None,
    dry_run: bool = False,
) -> ExecutionLog:
    entry = LogEntry(
        action_id="a1",
        action_type=ActionType.MOVE,
        source="/d/a.pdf",
        status=status,
        destination="/e/a.pdf",
    )
    moment = BASE + timedelta(minutes=minutes)
    return ExecutionLog(
        entries=(entry,),
        kind=kind,
        root="/d",
        started=moment,
        finished=moment,
        reverses=reverses,
        dry_run=dry_run,
        id=log_id,
    )


@pytest.fixture
def manager(tmp_path: Path) -> StateManager:
    """Create a StateManager with temporary directory."""
    return StateManager(state_dir=tmp_path / "state")


class TestStateManagerInit:
    """Tests for StateManager initialization."""

    def test_paths(self, tmp_path: Path) -> None:
        manager = StateManager(state_dir=tmp_path)
        assert manager.history_path == tmp_path / "history.jsonl"
        assert manager.last_scan_path == tmp_path / "last-scan.json"

    def test_default_state_dir(self, xdg_home: Path) -> None:
        manager = StateManager()
        assert manager.history_path == xdg_home / "state" / "tidyctl" / "history.jsonl"


class TestRecordLog:
    """Tests for StateManager.record_log."""

    def test_creates_directories_and_file(self, manager: StateManager) -> None:
        manager.record_log(_log("one"))
        assert manager.history_path.exists()

    def test_writes_one_json_line_per_log(self, manager: StateManager) -> None:
        manager.record_log(_log("one"))
        manager.record_log(_log("two", minutes=1))

        lines = manager.history_path.read_text().splitlines()

        assert len(lines) == 2
        assert [json.loads(line)["id"] for line in lines] == ["one", "two"]

    def test_default_location(self, xdg_home: Path) -> None:
        StateManager().record_log(_log("one"))
        assert (xdg_home / "state" / "tidyctl" / "history.jsonl").exists()


class TestGetHistory:
    """Tests for StateManager.get_history."""

    def test_empty_without_file(self, manager: StateManager) -> None:
        assert manager.get_history() == []

    def test_newest_first(self, manager: StateManager) -> None:
        for index, log_id in enumerate(("one", "two", "three")):
            manager.record_log(_log(log_id, minutes=index))

        assert [log.id for log in manager.get_history()] == ["three", "two", "one"]
        assert [log.id for log in manager.get_history(limit=2)] == ["three", "two"]

    def test_logs_survive_round_trip(self, manager: StateManager) -> None:
        log = _log("one")
        manager.record_log(log)
        assert manager.get_history() == [log]

    def test_corrupt_lines_skipped(
        self, manager: StateManager, caplog: pytest.LogCaptureFixture
    ) -> None:
        manager.record_log(_log("one"))
        with manager.history_path.open("a") as f:
            f.write("{not json\n\n")
            f.write('{"id": "x"}\n')
        manager.record_log(_log("two"))

        with caplog.at_level(logging.WARNING, logger="tidyctl.core.state"):
            history = manager.get_history()

        assert [log.id for log in history] == ["two", "one"]
        assert "line 2" in caplog.text
        assert "line 4" in caplog.text


class TestGetLog:
    """Tests for StateManager.get_log."""

    def test_exact_and_prefix(self, manager: StateManager) -> None:
        manager.record_log(_log("abc123"))
        manager.record_log(_log("abd456"))

        assert manager.get_log("abc123") is not None
        found = manager.get_log("abd")
        assert found is not None
        assert found.id == "abd456"

    def test_ambiguous_or_missing(self, manager: StateManager) -> None:
        manager.record_log(_log("abc123"))
        manager.record_log(_log("abd456"))

        assert manager.get_log("ab") is None
        assert manager.get_log("zzz") is None


class TestReversibility:
    """Tests for undo bookkeeping."""

    def test_last_reversible_skips_undone(self, manager: StateManager) -> None:
        manager.record_log(_log("first"))
        manager.record_log(_log("second", minutes=1))
        manager.record_log(_log("undo-2", minutes=2, kind=LogKind.UNDO, reverses="second"))

        last = manager.get_last_reversible()

        assert last is not None
        assert last.id == "first"
        assert manager.is_reversed("second")
        assert not manager.is_reversed("first")
        assert manager.get_reversed_ids() == {"second"}

    def test_last_reversible_ignores_dry_runs_and_failures(self, manager: StateManager) -> None:
        manager.record_log(_log("ok"))
        manager.record_log(_log("failed", minutes=1, status=EntryStatus.FAILED))
        manager.record_log(_log("dry", minutes=2, dry_run=True))

        last = manager.get_last_reversible()

        assert last is not None
        assert last.id == "ok"

    def test_nothing_reversible(self, manager: StateManager) -> None:
        assert manager.get_last_reversible() is None


class TestScanRecords:
    """Tests for last-scan bookkeeping."""

    def test_empty_without_file(self, manager: StateManager) -> None:
        assert manager.get_last_scans() == {}
        assert manager.get_last_scan("/d") is None

    def test_record_and_read(self, manager: StateManager) -> None:
        manager.record_scan(ScanResult(root="/d", files=(), completed=BASE))
        manager.record_scan(ScanResult(root="/a", files=(), completed=BASE))
        later = BASE + timedelta(hours=1)
        manager.record_scan(ScanResult(root="/d", files=(), completed=later))

        assert manager.get_last_scans() == {"/a": BASE, "/d": later}
        assert manager.get_last_scan("/d") == later
        assert list(json.loads(manager.last_scan_path.read_text())) == ["/a", "/d"]

    def test_unreadable_record_ignored(
        self, manager: StateManager, caplog: pytest.LogCaptureFixture
    ) -> None:
        manager.last_scan_path.parent.mkdir(parents=True)
        manager.last_scan_path.write_text("[1, 2")

        with caplog.at_level(logging.WARNING, logger="tidyctl.core.state"):
            assert manager.get_last_scans() == {}
        assert "Ignoring unreadable scan record" in caplog.text

    def test_no_temp_files_left(self, manager: StateManager) -> None:
        manager.record_scan(ScanResult(root="/d", files=(), completed=BASE))
        assert [p.name for p in manager.last_scan_path.parent.iterdir()] == ["last-scan.json"]
