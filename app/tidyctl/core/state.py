"""State management for execution history and scan records.

This module provides the StateManager class for persisting execution
logs in a JSONL file and remembering when each root was last scanned.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile

from tidyctl.core.paths import ensure_state_dir, get_state_dir
from tidyctl.models.execution import ExecutionLog, LogKind
from tidyctl.models.scan_result import ScanResult

logger = logging.getLogger(__name__)


class StateManager:
    """Manages persisted state in the XDG state directory.

    Storage location: ~/.local/state/tidyctl/

    The history file uses JSON Lines format where each line is a complete
    ExecutionLog. Undo logs are appended like any other log and mark the
    log they reverse through their ``reverses`` field, so the file is
    never rewritten.

    Attributes:
        state_dir: Directory containing the state files.
    """

    HISTORY_FILENAME = "history.jsonl"
    LAST_SCAN_FILENAME = "last-scan.json"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateManager.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/tidyctl
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    @property
    def last_scan_path(self) -> Path:
        """Path to last-scan.json file."""
        return self._state_dir / self.LAST_SCAN_FILENAME

    def _ensure_state_dir(self) -> None:
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def record_log(self, log: ExecutionLog) -> None:
        """Append an execution or undo log to the history file.

        Args:
            log: The log to record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        self._ensure_state_dir()

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(log.to_json_line() + "\n")
            f.flush()

    def get_history(self, limit: int | None = None) -> list[ExecutionLog]:
        """Read logs, newest first.

        Corrupt lines are skipped with a warning.

        Args:
            limit: Maximum number of logs to return. If None, returns all.

        Returns:
            List of ExecutionLog, newest first. Empty if no history exists.
        """
        if not self.history_path.exists():
            return []

        logs: list[ExecutionLog] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    logs.append(ExecutionLog.from_json_line(line))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)

        logs.reverse()

        if limit is not None:
            return logs[:limit]
        return logs

    def get_log(self, log_id: str) -> ExecutionLog | None:
        """Find a log by ID or unique ID prefix.

        Args:
            log_id: Full log ID or a prefix matching exactly one log.

        Returns:
            ExecutionLog if found, None otherwise.
        """
        history = self.get_history()
        for log in history:
            if log.id == log_id:
                return log

        matches = [log for log in history if log.id.startswith(log_id)]
        if len(matches) == 1:
            return matches[0]
        return None

    def get_reversed_ids(self) -> set[str]:
        """IDs of execution logs that an undo log has already reversed."""
        return {
            log.reverses
            for log in self.get_history()
            if log.kind == LogKind.UNDO and log.reverses is not None
        }

    def is_reversed(self, log_id: str) -> bool:
        """Check whether a log has already been undone."""
        return log_id in self.get_reversed_ids()

    def get_last_reversible(self) -> ExecutionLog | None:
        """Get the most recent execution log that can still be undone.

        Returns:
            Newest reversible, not yet reversed ExecutionLog, or None.
        """
        reversed_ids = self.get_reversed_ids()
        for log in self.get_history():
            if log.is_reversible and log.id not in reversed_ids:
                return log
        return None

    # -------------------------------------------------------------------------
    # Scan records
    # -------------------------------------------------------------------------

    def get_last_scans(self) -> dict[str, datetime]:
        """Read the last completed scan time of every recorded root.

        Returns:
            Mapping of absolute root path to completion time. Empty if
            the record is missing or unreadable.
        """
        if not self.last_scan_path.exists():
            return {}

        try:
            with self.last_scan_path.open(encoding="utf-8") as f:
                raw = json.load(f)
            return {root: datetime.fromisoformat(value) for root, value in raw.items()}
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable scan record %s: %s", self.last_scan_path, e)
            return {}

    def get_last_scan(self, root: str) -> datetime | None:
        """Get the last completed scan time of a root, if recorded."""
        return self.get_last_scans().get(root)

    def record_scan(self, result: ScanResult) -> None:
        """Remember when a root was last scanned.

        The record is rewritten atomically.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        self._ensure_state_dir()

        scans = self.get_last_scans()
        scans[result.root] = result.completed
        data = {root: completed.isoformat() for root, completed in sorted(scans.items())}

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._state_dir,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                json.dump(data, f, indent=2)
            os.replace(str(tmp_path), str(self.last_scan_path))
        except OSError:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise
