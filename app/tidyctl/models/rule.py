"""Rule models for declarative file organization.

A rule pairs an ordered list of conditions with a single outcome.
Conditions and outcomes are closed sets of variants, each variant a
small immutable dataclass carrying only its own payload. Evaluation
code dispatches over the variants explicitly.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from tidyctl.models.descriptor import FileDescriptor


class ConditionKind(str, Enum):
    """Tag identifying a condition variant."""

    EXTENSION_EQUALS = "extension_equals"
    NAME_CONTAINS = "name_contains"
    SIZE_GREATER_THAN = "size_greater_than"
    CREATED_BEFORE = "created_before"
    MODIFIED_BEFORE = "modified_before"
    IS_DIRECTORY = "is_directory"


class OutcomeKind(str, Enum):
    """Tag identifying an outcome variant."""

    MOVE = "move"
    COPY = "copy"
    DELETE = "delete"
    RENAME = "rename"
    SKIP = "skip"


# =============================================================================
# Conditions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ExtensionEquals:
    """Matches files whose extension equals the given one (case-insensitive)."""

    extension: str

    def __post_init__(self) -> None:
        normalized = self.extension.strip().lstrip(".").lower()
        if not normalized:
            msg = "Extension cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "extension", normalized)

    @property
    def kind(self) -> ConditionKind:
        return ConditionKind.EXTENSION_EQUALS

    def matches(self, descriptor: FileDescriptor) -> bool:
        return descriptor.extension == self.extension


@dataclass(frozen=True, slots=True)
class NameContains:
    """Matches entries whose name contains the substring (case-sensitive)."""

    substring: str

    def __post_init__(self) -> None:
        if not self.substring:
            msg = "Substring cannot be empty"
            raise ValueError(msg)

    @property
    def kind(self) -> ConditionKind:
        return ConditionKind.NAME_CONTAINS

    def matches(self, descriptor: FileDescriptor) -> bool:
        return self.substring in descriptor.name


@dataclass(frozen=True, slots=True)
class SizeGreaterThan:
    """Matches files strictly larger than the byte count.

    Directories carry no size and never match.
    """

    size_bytes: int

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            msg = f"Size threshold cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def kind(self) -> ConditionKind:
        return ConditionKind.SIZE_GREATER_THAN

    def matches(self, descriptor: FileDescriptor) -> bool:
        return descriptor.size_bytes is not None and descriptor.size_bytes > self.size_bytes


@dataclass(frozen=True, slots=True)
class CreatedBefore:
    """Matches entries created strictly before the timestamp."""

    timestamp: datetime

    def __post_init__(self) -> None:
        _assume_utc(self)

    @property
    def kind(self) -> ConditionKind:
        return ConditionKind.CREATED_BEFORE

    def matches(self, descriptor: FileDescriptor) -> bool:
        return descriptor.created < self.timestamp


@dataclass(frozen=True, slots=True)
class ModifiedBefore:
    """Matches entries last modified strictly before the timestamp."""

    timestamp: datetime

    def __post_init__(self) -> None:
        _assume_utc(self)

    @property
    def kind(self) -> ConditionKind:
        return ConditionKind.MODIFIED_BEFORE

    def matches(self, descriptor: FileDescriptor) -> bool:
        return descriptor.modified < self.timestamp


@dataclass(frozen=True, slots=True)
class IsDirectory:
    """Matches directories."""

    @property
    def kind(self) -> ConditionKind:
        return ConditionKind.IS_DIRECTORY

    def matches(self, descriptor: FileDescriptor) -> bool:
        return descriptor.is_directory


def _assume_utc(condition: CreatedBefore | ModifiedBefore) -> None:
    """Interpret a naive condition timestamp as UTC."""
    if condition.timestamp.tzinfo is None:
        object.__setattr__(condition, "timestamp", condition.timestamp.replace(tzinfo=UTC))


RuleCondition = (
    ExtensionEquals | NameContains | SizeGreaterThan | CreatedBefore | ModifiedBefore | IsDirectory
)


# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class MoveTo:
    """Move the entry into a destination directory."""

    destination: str

    def __post_init__(self) -> None:
        if not self.destination:
            msg = "Move destination cannot be empty"
            raise ValueError(msg)

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.MOVE


@dataclass(frozen=True, slots=True)
class CopyTo:
    """Copy the entry into a destination directory, leaving the source."""

    destination: str

    def __post_init__(self) -> None:
        if not self.destination:
            msg = "Copy destination cannot be empty"
            raise ValueError(msg)

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.COPY


@dataclass(frozen=True, slots=True)
class Delete:
    """Send the entry to the trash."""

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.DELETE


@dataclass(frozen=True, slots=True)
class Rename:
    """Rename in place as prefix + stem + suffix + extension."""

    prefix: str = ""
    suffix: str = ""

    def __post_init__(self) -> None:
        for part in (self.prefix, self.suffix):
            if "/" in part or "\x00" in part:
                msg = f"Rename prefix/suffix cannot contain path separators: {part!r}"
                raise ValueError(msg)

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.RENAME


@dataclass(frozen=True, slots=True)
class Skip:
    """Leave the entry alone, with an explanation."""

    reason: str = ""

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.SKIP


RuleOutcome = MoveTo | CopyTo | Delete | Rename | Skip


# =============================================================================
# Rule
# =============================================================================


def new_rule_id() -> str:
    """Generate a stable rule identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class Rule:
    """User-declared matching conditions plus a resulting outcome.

    Conditions are conjunctive: every condition must hold for the rule
    to match. A rule with no conditions matches every entry ("match all");
    this is intentional and callers that load rules from user input are
    expected to warn about it.

    Attributes:
        name: Display name, also used as the plan reason.
        outcome: What happens to matching entries.
        conditions: Ordered conditions (all must hold).
        description: Human-readable description.
        enabled: Disabled rules never participate in planning.
        id: Stable unique identifier, independent of the name.
    """

    name: str
    outcome: RuleOutcome
    conditions: tuple[RuleCondition, ...] = ()
    description: str = ""
    enabled: bool = True
    id: str = field(default_factory=new_rule_id)

    def __post_init__(self) -> None:
        """Validate rule data after initialization."""
        if not self.id:
            msg = "Rule ID cannot be empty"
            raise ValueError(msg)
        if not self.name:
            msg = "Rule name cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "conditions", tuple(self.conditions))

    @property
    def matches_all(self) -> bool:
        """Whether this rule has no conditions and matches every entry."""
        return not self.conditions

    def matches(self, descriptor: FileDescriptor) -> bool:
        """Check whether every condition holds for the descriptor."""
        return all(condition.matches(descriptor) for condition in self.conditions)
