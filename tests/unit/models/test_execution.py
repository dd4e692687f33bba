"""Unit tests for execution log models."""

import json
from datetime import UTC, datetime

import pytest
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import ActionType

STARTED = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)
FINISHED = datetime(2026, 1, 15, 12, 1, tzinfo=UTC)


def _entry(
    action_type: ActionType = ActionType.MOVE,
    status: EntryStatus = EntryStatus.SUCCESS,
    **kwargs: str,
) -> LogEntry:
    return LogEntry(
        action_id="a1",
        action_type=action_type,
        source="/d/a.pdf",
        status=status,
        **kwargs,
    )


class TestLogEntry:
    """Tests for LogEntry."""

    def test_status_properties(self) -> None:
        """succeeded and failed reflect the status."""
        assert _entry().succeeded
        assert _entry(status=EntryStatus.FAILED).failed
        assert not _entry(status=EntryStatus.SKIPPED).succeeded

    def test_is_reversible(self) -> None:
        """Only successful mutating entries are reversible."""
        assert _entry().is_reversible
        assert not _entry(ActionType.SKIP, EntryStatus.SKIPPED).is_reversible
        assert not _entry(status=EntryStatus.FAILED).is_reversible

    def test_to_dict_omits_empty_fields(self) -> None:
        """Optional fields are left out when unset."""
        data = _entry(ActionType.SKIP, EntryStatus.SKIPPED).to_dict()
        assert data == {
            "action_id": "a1",
            "action_type": "skip",
            "source": "/d/a.pdf",
            "status": "skipped",
        }

    def test_from_dict_restores_fields(self) -> None:
        """from_dict reads back what to_dict wrote."""
        entry = _entry(ActionType.DELETE, trash_path="/t/files/a.pdf")
        assert LogEntry.from_dict(entry.to_dict()) == entry

    def test_created_dirs_serialized(self) -> None:
        """Created directories are written as a list and read back as a tuple."""
        entry = LogEntry(
            action_id="a1",
            action_type=ActionType.MOVE,
            source="/d/a.pdf",
            status=EntryStatus.SUCCESS,
            destination="/d/Archive/PDFs/a.pdf",
            created_dirs=("/d/Archive", "/d/Archive/PDFs"),
        )
        data = entry.to_dict()

        assert data["created_dirs"] == ["/d/Archive", "/d/Archive/PDFs"]
        assert LogEntry.from_dict(data) == entry
        assert "created_dirs" not in _entry().to_dict()

    def test_from_dict_rejects_unknown_status(self) -> None:
        """Unknown status values raise ValueError."""
        data = _entry().to_dict()
        data["status"] = "maybe"
        with pytest.raises(ValueError):
            LogEntry.from_dict(data)


class TestExecutionLog:
    """Tests for ExecutionLog."""

    def _log(self, *entries: LogEntry, **kwargs: object) -> ExecutionLog:
        return ExecutionLog(
            entries=entries,
            started=STARTED,
            finished=FINISHED,
            **kwargs,  # type: ignore[arg-type]
        )

    def test_counts(self) -> None:
        """Counts and summary group entries by status."""
        log = self._log(
            _entry(),
            _entry(ActionType.SKIP, EntryStatus.SKIPPED),
            _entry(status=EntryStatus.FAILED, message="boom"),
        )
        assert log.summary == {"success": 1, "skipped": 1, "failed": 1}
        assert log.has_failures
        assert len(log) == 3

    def test_undo_requires_reverses(self) -> None:
        """Undo logs must name the log they reverse."""
        with pytest.raises(ValueError, match="reverses"):
            self._log(kind=LogKind.UNDO)

    def test_is_reversible(self) -> None:
        """Executions with a successful change are reversible."""
        assert self._log(_entry()).is_reversible

    def test_not_reversible_without_changes(self) -> None:
        """A log of only skips or failures has nothing to reverse."""
        log = self._log(
            _entry(ActionType.SKIP, EntryStatus.SKIPPED),
            _entry(status=EntryStatus.FAILED),
        )
        assert not log.is_reversible

    def test_dry_run_and_undo_not_reversible(self) -> None:
        """Dry-run logs and undo logs are never reversible."""
        assert not self._log(_entry(), dry_run=True).is_reversible
        assert not self._log(_entry(), kind=LogKind.UNDO, reverses="x").is_reversible

    def test_get(self) -> None:
        """Entries are found by action ID."""
        entry = _entry()
        log = self._log(entry)
        assert log.get("a1") is entry
        assert log.get("zz") is None

    def test_json_line_round_trip(self) -> None:
        """A log survives serialization to one JSON line."""
        log = self._log(
            _entry(destination="/e/a.pdf"),
            _entry(ActionType.DELETE, trash_path="/t/files/b.pdf"),
            root="/d",
        )
        line = log.to_json_line()
        assert "\n" not in line
        assert ExecutionLog.from_json_line(line) == log

    def test_undo_log_serialization(self) -> None:
        """kind and reverses are written for undo logs."""
        log = self._log(_entry(), kind=LogKind.UNDO, reverses="abc")
        data = json.loads(log.to_json_line())
        assert data["kind"] == "undo"
        assert data["reverses"] == "abc"
        assert "dry_run" not in data

    def test_from_dict_defaults_kind(self) -> None:
        """Logs without kind are read as executions."""
        data = self._log(_entry()).to_dict()
        del data["kind"]
        assert ExecutionLog.from_dict(data).kind == LogKind.EXECUTION

    def test_from_json_line_invalid(self) -> None:
        """Invalid JSON raises JSONDecodeError."""
        with pytest.raises(json.JSONDecodeError):
            ExecutionLog.from_json_line("{not json")
