"""Data models for tidyctl.

This module exports the core data structures used throughout the application.
"""

from tidyctl.models.descriptor import FileDescriptor
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import NO_MATCHING_RULE, ActionPlan, ActionType, PlannedAction
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
from tidyctl.models.scan_result import ScanResult
from tidyctl.models.staleness import ScanStalenessState, StalenessLevel

__all__ = [
    "NO_MATCHING_RULE",
    "ActionPlan",
    "ActionType",
    "ConditionKind",
    "CopyTo",
    "CreatedBefore",
    "Delete",
    "EntryStatus",
    "ExecutionLog",
    "ExtensionEquals",
    "FileDescriptor",
    "IsDirectory",
    "LogEntry",
    "LogKind",
    "ModifiedBefore",
    "MoveTo",
    "NameContains",
    "OutcomeKind",
    "PlannedAction",
    "Rename",
    "Rule",
    "RuleCondition",
    "RuleOutcome",
    "ScanResult",
    "ScanStalenessState",
    "SizeGreaterThan",
    "Skip",
    "StalenessLevel",
]
