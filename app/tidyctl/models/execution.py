"""Execution log models.

This module defines the per-action log produced by executing a plan
(and by undoing a previous execution), including serialization to
JSON lines for the history store.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tidyctl.models.plan import ActionType


class EntryStatus(str, Enum):
    """Outcome status of a single log entry.

    Attributes:
        SUCCESS: The action completed.
        SKIPPED: The action was a skip; nothing was attempted.
        FAILED: The action was attempted and failed.
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class LogKind(str, Enum):
    """Whether a log records an execution or the undo of one."""

    EXECUTION = "execution"
    UNDO = "undo"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """Record of one processed action.

    Attributes:
        action_id: ID of the PlannedAction that produced this entry.
        action_type: Type of the action that was processed.
        source: Path the action operated on.
        status: Outcome status.
        destination: Resulting path for successful move, copy and rename
            (for undo entries, the path the entry was restored to).
        message: Explanation for skips and failures.
        trash_path: Location inside the trash for successful deletes.
        created_dirs: Directories created for the destination, shallowest
            first, which undo removes again when they are empty.
    """

    action_id: str
    action_type: ActionType
    source: str
    status: EntryStatus
    destination: str | None = None
    message: str | None = None
    trash_path: str | None = None
    created_dirs: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        """Check if the entry completed successfully."""
        return self.status == EntryStatus.SUCCESS

    @property
    def failed(self) -> bool:
        """Check if the entry failed."""
        return self.status == EntryStatus.FAILED

    @property
    def is_reversible(self) -> bool:
        """Whether undo has anything to reverse for this entry."""
        return self.succeeded and self.action_type.is_mutating

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {
            "action_id": self.action_id,
            "action_type": self.action_type.value,
            "source": self.source,
            "status": self.status.value,
        }
        if self.destination is not None:
            result["destination"] = self.destination
        if self.message is not None:
            result["message"] = self.message
        if self.trash_path is not None:
            result["trash_path"] = self.trash_path
        if self.created_dirs:
            result["created_dirs"] = list(self.created_dirs)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEntry:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If action_type or status is invalid.
        """
        return cls(
            action_id=data["action_id"],
            action_type=ActionType(data["action_type"]),
            source=data["source"],
            status=EntryStatus(data["status"]),
            destination=data.get("destination"),
            message=data.get("message"),
            trash_path=data.get("trash_path"),
            created_dirs=tuple(data.get("created_dirs", ())),
        )


def new_log_id() -> str:
    """Generate a unique log identifier."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True, slots=True)
class ExecutionLog:
    """Ordered, immutable record of an execution or undo run.

    Attributes:
        entries: One entry per processed action, in processing order.
        kind: Whether this log records an execution or an undo.
        root: Root directory the plan was made for, if known.
        started: When processing started.
        finished: When the last action was processed.
        reverses: For undo logs, the ID of the log that was reversed.
        dry_run: Whether the run only simulated its actions.
        id: Unique log identifier.
    """

    entries: tuple[LogEntry, ...]
    kind: LogKind = LogKind.EXECUTION
    root: str | None = None
    started: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished: datetime = field(default_factory=lambda: datetime.now(UTC))
    reverses: str | None = None
    dry_run: bool = False
    id: str = field(default_factory=new_log_id)

    def __post_init__(self) -> None:
        """Validate log data after initialization."""
        if not self.id:
            msg = "Log ID cannot be empty"
            raise ValueError(msg)
        if self.kind == LogKind.UNDO and not self.reverses:
            msg = "Undo log must reference the log it reverses"
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def succeeded(self) -> int:
        """Number of successful entries."""
        return sum(1 for e in self.entries if e.status == EntryStatus.SUCCESS)

    @property
    def skipped(self) -> int:
        """Number of skipped entries."""
        return sum(1 for e in self.entries if e.status == EntryStatus.SKIPPED)

    @property
    def failed(self) -> int:
        """Number of failed entries."""
        return sum(1 for e in self.entries if e.status == EntryStatus.FAILED)

    @property
    def summary(self) -> dict[str, int]:
        """Entry counts by status."""
        return {
            EntryStatus.SUCCESS.value: self.succeeded,
            EntryStatus.SKIPPED.value: self.skipped,
            EntryStatus.FAILED.value: self.failed,
        }

    @property
    def has_failures(self) -> bool:
        """Check if any entry failed."""
        return self.failed > 0

    @property
    def is_reversible(self) -> bool:
        """Whether this is an execution log with at least one reversible entry."""
        if self.kind != LogKind.EXECUTION or self.dry_run:
            return False
        return any(e.is_reversible for e in self.entries)

    def get(self, action_id: str) -> LogEntry | None:
        """Find the entry produced by a given action."""
        for entry in self.entries:
            if entry.action_id == action_id:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "started": self.started.isoformat(),
            "finished": self.finished.isoformat(),
            "entries": [entry.to_dict() for entry in self.entries],
        }
        if self.root is not None:
            result["root"] = self.root
        if self.reverses is not None:
            result["reverses"] = self.reverses
        if self.dry_run:
            result["dry_run"] = True
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionLog:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            id=data["id"],
            kind=LogKind(data.get("kind", LogKind.EXECUTION.value)),
            root=data.get("root"),
            started=datetime.fromisoformat(data["started"]),
            finished=datetime.fromisoformat(data["finished"]),
            reverses=data.get("reverses"),
            dry_run=data.get("dry_run", False),
            entries=tuple(LogEntry.from_dict(entry) for entry in data["entries"]),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> ExecutionLog:
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))
