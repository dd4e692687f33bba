"""Rules file I/O operations.

Rules are stored in ~/.config/tidyctl/rules.toml as an array of tables.
The file order is the evaluation order. Each rule carries a list of
condition tables and one outcome table, both tagged by a kind field:

    [[rules]]
    id = "4f1c..."
    name = "Archive PDFs"
    outcome = { action = "move", destination = "~/Documents/PDF" }

    [[rules.conditions]]
    kind = "extension_equals"
    extension = "pdf"

The file is validated with Pydantic and converted into the immutable
domain dataclasses of tidyctl.models.rule.
"""

import logging
import os
import tomllib
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tidyctl.core.errors import TidyError
from tidyctl.core.paths import get_rules_path
from tidyctl.models.rule import (
    ConditionKind,
    CopyTo,
    CreatedBefore,
    Delete,
    ExtensionEquals,
    IsDirectory,
    ModifiedBefore,
    MoveTo,
    NameContains,
    OutcomeKind,
    Rename,
    Rule,
    RuleCondition,
    RuleOutcome,
    SizeGreaterThan,
    Skip,
)

logger = logging.getLogger(__name__)


class RulesError(TidyError):
    """Base exception for rules file errors."""


class RulesNotFoundError(RulesError):
    """Raised when the rules file is not found."""


class RulesParseError(RulesError):
    """Raised when the rules file cannot be parsed."""


class RulesValidationError(RulesError):
    """Raised when the rules file content is invalid."""


# =============================================================================
# File schema
# =============================================================================


class ConditionEntry(BaseModel):
    """A condition table. Only the field its kind needs may be set."""

    model_config = ConfigDict(extra="forbid")

    kind: ConditionKind
    extension: str | None = None
    substring: str | None = None
    size_bytes: Annotated[int | None, Field(ge=0)] = None
    timestamp: datetime | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "ConditionEntry":
        required = _CONDITION_FIELDS[self.kind]
        given = {
            name
            for name in ("extension", "substring", "size_bytes", "timestamp")
            if getattr(self, name) is not None
        }
        if required is not None and required not in given:
            msg = f"Condition '{self.kind.value}' requires '{required}'"
            raise ValueError(msg)
        extra = given - {required}
        if extra:
            msg = f"Condition '{self.kind.value}' does not accept: {', '.join(sorted(extra))}"
            raise ValueError(msg)
        return self


_CONDITION_FIELDS: dict[ConditionKind, str | None] = {
    ConditionKind.EXTENSION_EQUALS: "extension",
    ConditionKind.NAME_CONTAINS: "substring",
    ConditionKind.SIZE_GREATER_THAN: "size_bytes",
    ConditionKind.CREATED_BEFORE: "timestamp",
    ConditionKind.MODIFIED_BEFORE: "timestamp",
    ConditionKind.IS_DIRECTORY: None,
}


class OutcomeEntry(BaseModel):
    """The outcome table of a rule."""

    model_config = ConfigDict(extra="forbid")

    action: OutcomeKind
    destination: str | None = None
    prefix: str = ""
    suffix: str = ""
    reason: str = ""

    @model_validator(mode="after")
    def _check_payload(self) -> "OutcomeEntry":
        needs_destination = self.action in (OutcomeKind.MOVE, OutcomeKind.COPY)
        if needs_destination and not self.destination:
            msg = f"Outcome '{self.action.value}' requires 'destination'"
            raise ValueError(msg)
        if not needs_destination and self.destination is not None:
            msg = f"Outcome '{self.action.value}' does not accept 'destination'"
            raise ValueError(msg)
        if self.action == OutcomeKind.RENAME and not (self.prefix or self.suffix):
            msg = "Outcome 'rename' requires 'prefix' or 'suffix'"
            raise ValueError(msg)
        return self


class RuleEntry(BaseModel):
    """One [[rules]] table."""

    model_config = ConfigDict(extra="forbid")

    id: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1)]
    description: str = ""
    enabled: bool = True
    conditions: list[ConditionEntry] = Field(default_factory=list)
    outcome: OutcomeEntry


class RulesFile(BaseModel):
    """Top-level schema of rules.toml."""

    model_config = ConfigDict(extra="forbid")

    rules: list[RuleEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "RulesFile":
        seen: set[str] = set()
        for entry in self.rules:
            if entry.id in seen:
                msg = f"Duplicate rule id: {entry.id}"
                raise ValueError(msg)
            seen.add(entry.id)
        return self


# =============================================================================
# Conversion
# =============================================================================


def condition_from_entry(entry: ConditionEntry) -> RuleCondition:
    """Convert a validated condition table into a domain condition."""
    if entry.kind == ConditionKind.EXTENSION_EQUALS:
        return ExtensionEquals(entry.extension or "")
    if entry.kind == ConditionKind.NAME_CONTAINS:
        return NameContains(entry.substring or "")
    if entry.kind == ConditionKind.SIZE_GREATER_THAN:
        return SizeGreaterThan(entry.size_bytes or 0)
    if entry.kind == ConditionKind.CREATED_BEFORE:
        return CreatedBefore(_aware(entry.timestamp))
    if entry.kind == ConditionKind.MODIFIED_BEFORE:
        return ModifiedBefore(_aware(entry.timestamp))
    return IsDirectory()


def outcome_from_entry(entry: OutcomeEntry) -> RuleOutcome:
    """Convert a validated outcome table into a domain outcome."""
    if entry.action == OutcomeKind.MOVE:
        return MoveTo(entry.destination or "")
    if entry.action == OutcomeKind.COPY:
        return CopyTo(entry.destination or "")
    if entry.action == OutcomeKind.DELETE:
        return Delete()
    if entry.action == OutcomeKind.RENAME:
        return Rename(prefix=entry.prefix, suffix=entry.suffix)
    return Skip(reason=entry.reason)


def rule_from_entry(entry: RuleEntry) -> Rule:
    """Convert a validated rule table into a domain Rule.

    Raises:
        ValueError: If a condition or outcome payload is rejected by the model.
    """
    return Rule(
        id=entry.id,
        name=entry.name,
        description=entry.description,
        enabled=entry.enabled,
        conditions=tuple(condition_from_entry(c) for c in entry.conditions),
        outcome=outcome_from_entry(entry.outcome),
    )


def condition_to_dict(condition: RuleCondition) -> dict[str, Any]:
    """Convert a domain condition into a TOML table."""
    result: dict[str, Any] = {"kind": condition.kind.value}
    if isinstance(condition, ExtensionEquals):
        result["extension"] = condition.extension
    elif isinstance(condition, NameContains):
        result["substring"] = condition.substring
    elif isinstance(condition, SizeGreaterThan):
        result["size_bytes"] = condition.size_bytes
    elif isinstance(condition, (CreatedBefore, ModifiedBefore)):
        result["timestamp"] = condition.timestamp
    return result


def outcome_to_dict(outcome: RuleOutcome) -> dict[str, Any]:
    """Convert a domain outcome into a TOML table, omitting empty fields."""
    result: dict[str, Any] = {"action": outcome.kind.value}
    if isinstance(outcome, (MoveTo, CopyTo)):
        result["destination"] = outcome.destination
    elif isinstance(outcome, Rename):
        if outcome.prefix:
            result["prefix"] = outcome.prefix
        if outcome.suffix:
            result["suffix"] = outcome.suffix
    elif isinstance(outcome, Skip) and outcome.reason:
        result["reason"] = outcome.reason
    return result


def rule_to_dict(rule: Rule) -> dict[str, Any]:
    """Convert a domain Rule into a [[rules]] table."""
    result: dict[str, Any] = {"id": rule.id, "name": rule.name}
    if rule.description:
        result["description"] = rule.description
    if not rule.enabled:
        result["enabled"] = False
    result["outcome"] = outcome_to_dict(rule.outcome)
    if rule.conditions:
        result["conditions"] = [condition_to_dict(c) for c in rule.conditions]
    return result


def _aware(timestamp: datetime | None) -> datetime:
    """Interpret naive TOML datetimes as UTC."""
    if timestamp is None:
        msg = "Timestamp is required"
        raise ValueError(msg)
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp


# =============================================================================
# File I/O
# =============================================================================


def load_rules(path: Path | None = None, *, missing_ok: bool = False) -> list[Rule]:
    """Load and validate rules from a TOML file.

    Args:
        path: Path to the rules file. If None, uses the default rules path.
        missing_ok: Return an empty list instead of raising when the file
            does not exist.

    Returns:
        Rules in file order.

    Raises:
        RulesNotFoundError: If the file doesn't exist and missing_ok is False.
        RulesParseError: If the TOML syntax is invalid.
        RulesValidationError: If the content doesn't match the schema.
    """
    rules_path = path or get_rules_path()

    if not rules_path.exists():
        if missing_ok:
            return []
        msg = f"Rules file not found: {rules_path}"
        raise RulesNotFoundError(msg)

    try:
        with open(rules_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise RulesParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise RulesError(f"Failed to read rules: {e}") from e

    try:
        parsed = RulesFile.model_validate(data)
        rules = [rule_from_entry(entry) for entry in parsed.rules]
    except (ValueError, ValidationError) as e:
        raise RulesValidationError(f"Invalid rules content: {e}") from e

    for rule in rules:
        if rule.matches_all and rule.enabled:
            logger.warning("Rule '%s' has no conditions and matches every entry", rule.name)

    return rules


def save_rules(rules: Sequence[Rule], path: Path | None = None) -> Path:
    """Save rules to a TOML file, preserving their order.

    The file is written atomically through a temporary file in the same
    directory and os.replace().

    Args:
        rules: Rules in evaluation order.
        path: Path to save to. If None, uses the default rules path.

    Returns:
        Path where the rules were saved.

    Raises:
        RulesError: If the file cannot be written.
    """
    rules_path = path or get_rules_path()
    rules_path.parent.mkdir(parents=True, exist_ok=True)

    data = {"rules": [rule_to_dict(rule) for rule in rules]}

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=rules_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(rules_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise RulesError(f"Failed to write rules: {e}") from e

    return rules_path


def find_rule(rules: Sequence[Rule], key: str) -> Rule | None:
    """Find a rule by ID, unique ID prefix, or exact name."""
    for rule in rules:
        if rule.id == key or rule.name == key:
            return rule
    prefixed = [rule for rule in rules if rule.id.startswith(key)]
    if len(prefixed) == 1:
        return prefixed[0]
    return None


