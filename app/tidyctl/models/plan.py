"""Action plan models.

This module defines the side-effect-free plan produced by the planner:
one resolved action per scanned entry, with destinations fully computed.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tidyctl.models.descriptor import FileDescriptor

NO_MATCHING_RULE = "no matching rule"


class ActionType(str, Enum):
    """Resolved type of a planned action.

    Attributes:
        MOVE: Relocate the entry into another directory.
        COPY: Duplicate the entry into another directory.
        DELETE: Send the entry to the trash.
        RENAME: Rename the entry within its parent directory.
        SKIP: Leave the entry untouched.
    """

    MOVE = "move"
    COPY = "copy"
    DELETE = "delete"
    RENAME = "rename"
    SKIP = "skip"

    @property
    def is_mutating(self) -> bool:
        """Whether executing this action touches the filesystem."""
        return self is not ActionType.SKIP


def new_action_id() -> str:
    """Generate a short unique action identifier."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True, slots=True)
class PlannedAction:
    """A single resolved action for one scanned entry.

    Attributes:
        target: The descriptor this action applies to.
        action_type: Resolved action type.
        reason: Human-readable reason (rule name, collision note,
            or "no matching rule").
        destination: Fully resolved destination path for move, copy
            and rename; None otherwise.
        rule_id: ID of the first matching rule, None if no rule matched.
        rule_name: Name of the first matching rule, None if no rule matched.
        id: Unique action ID used to correlate log entries.
    """

    target: FileDescriptor
    action_type: ActionType
    reason: str
    destination: str | None = None
    rule_id: str | None = None
    rule_name: str | None = None
    id: str = field(default_factory=new_action_id, compare=False)

    def __post_init__(self) -> None:
        """Validate action data after initialization."""
        needs_destination = self.action_type in (
            ActionType.MOVE,
            ActionType.COPY,
            ActionType.RENAME,
        )
        if needs_destination and not self.destination:
            msg = f"{self.action_type.value} action requires a destination"
            raise ValueError(msg)
        if not needs_destination and self.destination is not None:
            msg = f"{self.action_type.value} action cannot have a destination"
            raise ValueError(msg)

    @property
    def source(self) -> str:
        """Path of the entry the action operates on."""
        return self.target.path

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "id": self.id,
            "action": self.action_type.value,
            "source": self.source,
            "is_directory": self.target.is_directory,
            "reason": self.reason,
        }
        if self.destination is not None:
            result["destination"] = self.destination
        if self.rule_id is not None:
            result["rule_id"] = self.rule_id
            result["rule_name"] = self.rule_name
        return result


@dataclass(frozen=True, slots=True)
class ActionPlan:
    """Ordered, immutable list of planned actions for one scan snapshot.

    Attributes:
        actions: Planned actions in snapshot order.
        root: Root directory the snapshot was taken from (None if unknown).
        created: When the plan was generated.
        id: Unique plan identifier.
    """

    actions: tuple[PlannedAction, ...]
    root: str | None = None
    created: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)
    id: str = field(default_factory=new_action_id, compare=False)

    def __len__(self) -> int:
        return len(self.actions)

    def count(self, action_type: ActionType) -> int:
        """Count actions of one type."""
        return sum(1 for action in self.actions if action.action_type == action_type)

    @property
    def summary(self) -> dict[str, int]:
        """Action counts keyed by action type value, plus the total."""
        summary = {action_type.value: self.count(action_type) for action_type in ActionType}
        summary["total"] = len(self.actions)
        return summary

    @property
    def has_changes(self) -> bool:
        """Whether executing the plan would touch the filesystem at all."""
        return any(action.action_type.is_mutating for action in self.actions)

    def get(self, action_id: str) -> PlannedAction | None:
        """Find a planned action by ID."""
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "root": self.root,
            "created": self.created.isoformat(),
            "summary": self.summary,
            "actions": [action.to_dict() for action in self.actions],
        }
