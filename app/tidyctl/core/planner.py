"""Rule evaluation and plan generation.

The planner turns a scan snapshot and an ordered rule list into an
ActionPlan without touching the filesystem. For each entry the enabled
rules are tried in order and the first rule whose conditions all hold
decides the outcome; entries no rule matches are skipped.

Collision policy: a move, copy or rename whose resolved destination
already exists, or was already claimed by an earlier action of the same
plan, is resolved to a skip with a reason. Nothing is ever overwritten.
The same holds for destinations inside a directory the plan deletes,
moves or renames, and for such a directory when an earlier action of
the plan already targets a path inside it.
"""

import logging
import os
from collections.abc import Callable, Sequence
from enum import Enum

from tidyctl.models.descriptor import FileDescriptor
from tidyctl.models.plan import NO_MATCHING_RULE, ActionPlan, ActionType, PlannedAction
from tidyctl.models.rule import CopyTo, Delete, MoveTo, Rename, Rule, RuleOutcome, Skip

logger = logging.getLogger(__name__)


class DirectoryPolicy(str, Enum):
    """How move and copy outcomes treat matched directories.

    Attributes:
        MOVE_AS_UNIT: Move or copy the directory with its full contents.
        SKIP: Resolve directory moves and copies to skip.
    """

    MOVE_AS_UNIT = "move_as_unit"
    SKIP = "skip"


class Planner:
    """Builds action plans from scan snapshots and rules.

    The only outside information the planner consults is whether a
    destination path already exists, through the ``exists`` callable.
    Tests can pass a stub to keep planning fully deterministic.

    Args:
        directory_policy: Treatment of directories matched by move/copy.
        exists: Existence check for collision detection. Defaults to
            ``os.path.lexists`` so dangling links count as occupied.
    """

    def __init__(
        self,
        *,
        directory_policy: DirectoryPolicy = DirectoryPolicy.MOVE_AS_UNIT,
        exists: Callable[[str], bool] = os.path.lexists,
    ) -> None:
        self._directory_policy = directory_policy
        self._exists = exists

    def plan(
        self,
        files: Sequence[FileDescriptor],
        rules: Sequence[Rule],
        root: str | None = None,
    ) -> ActionPlan:
        """Generate a plan with exactly one action per descriptor.

        Args:
            files: Descriptors in snapshot (pre-order) order.
            rules: Rules in priority order; disabled rules are ignored.
            root: Scan root. Relative rule destinations are resolved
                against it (or against the working directory if None).

        Returns:
            ActionPlan in the same order as ``files``.
        """
        enabled = [rule for rule in rules if rule.enabled]
        claimed: set[str] = set()
        consumed: list[str] = []

        actions: list[PlannedAction] = []
        for descriptor in files:
            action = self._plan_entry(descriptor, enabled, root, claimed, consumed)
            if action.destination is not None:
                claimed.add(action.destination)
            if descriptor.is_directory and action.action_type in (
                ActionType.MOVE,
                ActionType.DELETE,
                ActionType.RENAME,
            ):
                consumed.append(descriptor.path)
            actions.append(action)

        plan = ActionPlan(actions=tuple(actions), root=root)
        logger.debug("Planned %d action(s): %s", len(plan), plan.summary)
        return plan

    def _plan_entry(
        self,
        descriptor: FileDescriptor,
        rules: list[Rule],
        root: str | None,
        claimed: set[str],
        consumed: list[str],
    ) -> PlannedAction:
        """Resolve the action for a single descriptor."""
        rule = first_matching_rule(descriptor, rules)
        if rule is None:
            return PlannedAction(
                target=descriptor,
                action_type=ActionType.SKIP,
                reason=NO_MATCHING_RULE,
            )

        container = _containing(descriptor.path, consumed)
        if container is not None:
            return _skip(descriptor, rule, f"inside {container}, which is already planned")

        return self._resolve(descriptor, rule, rule.outcome, root, claimed, consumed)

    def _resolve(
        self,
        descriptor: FileDescriptor,
        rule: Rule,
        outcome: RuleOutcome,
        root: str | None,
        claimed: set[str],
        consumed: list[str],
    ) -> PlannedAction:
        """Turn a rule outcome into a concrete action for the descriptor."""
        if isinstance(outcome, Skip):
            reason = f"{rule.name}: {outcome.reason}" if outcome.reason else rule.name
            return PlannedAction(
                target=descriptor,
                action_type=ActionType.SKIP,
                reason=reason,
                rule_id=rule.id,
                rule_name=rule.name,
            )

        if isinstance(outcome, Delete):
            inner = _claimed_inside(descriptor, claimed)
            if inner is not None:
                return _skip(descriptor, rule, f"{inner} is planned inside it")
            return PlannedAction(
                target=descriptor,
                action_type=ActionType.DELETE,
                reason=rule.name,
                rule_id=rule.id,
                rule_name=rule.name,
            )

        if isinstance(outcome, MoveTo | CopyTo):
            action_type = ActionType.MOVE if isinstance(outcome, MoveTo) else ActionType.COPY
            if descriptor.is_directory and self._directory_policy == DirectoryPolicy.SKIP:
                return _skip(descriptor, rule, "directory policy skips directories")
            directory = resolve_destination_dir(outcome.destination, root)
            destination = os.path.join(directory, descriptor.name)
            return self._claim(descriptor, rule, action_type, destination, claimed, consumed)

        if isinstance(outcome, Rename):
            new_name = renamed(descriptor, outcome.prefix, outcome.suffix)
            if new_name == descriptor.name:
                return _skip(descriptor, rule, "rename leaves the name unchanged")
            destination = os.path.join(descriptor.parent, new_name)
            return self._claim(descriptor, rule, ActionType.RENAME, destination, claimed, consumed)

        msg = f"Unknown rule outcome: {outcome!r}"
        raise TypeError(msg)

    def _claim(
        self,
        descriptor: FileDescriptor,
        rule: Rule,
        action_type: ActionType,
        destination: str,
        claimed: set[str],
        consumed: list[str],
    ) -> PlannedAction:
        """Build a move/copy/rename action unless its destination collides."""
        if destination == descriptor.path:
            return _skip(descriptor, rule, "already at destination")
        if descriptor.is_directory and _containing(destination, [descriptor.path]):
            return _skip(descriptor, rule, f"destination {destination} is inside the directory")
        if destination in claimed:
            return _skip(descriptor, rule, f"destination {destination} is already planned")
        container = _containing(destination, consumed)
        if container is not None:
            detail = f"destination is inside {container}, which is already planned"
            return _skip(descriptor, rule, detail)
        if self._exists(destination):
            return _skip(descriptor, rule, f"destination {destination} already exists")
        if action_type != ActionType.COPY:
            inner = _claimed_inside(descriptor, claimed)
            if inner is not None:
                return _skip(descriptor, rule, f"{inner} is planned inside it")

        return PlannedAction(
            target=descriptor,
            action_type=action_type,
            reason=rule.name,
            destination=destination,
            rule_id=rule.id,
            rule_name=rule.name,
        )


def first_matching_rule(descriptor: FileDescriptor, rules: Sequence[Rule]) -> Rule | None:
    """Return the first enabled rule whose conditions all hold.

    Args:
        descriptor: Entry to evaluate.
        rules: Rules in priority order.

    Returns:
        The winning rule, or None if no enabled rule matches.
    """
    for rule in rules:
        if rule.enabled and rule.matches(descriptor):
            return rule
    return None


def renamed(descriptor: FileDescriptor, prefix: str, suffix: str) -> str:
    """Compute prefix + stem + suffix + extension for a descriptor.

    The extension keeps its original case.
    """
    return f"{prefix}{descriptor.stem}{suffix}{descriptor.suffix}"


def resolve_destination_dir(destination: str, root: str | None) -> str:
    """Resolve a rule destination directory to a normalized absolute path.

    ``~`` is expanded; relative destinations are taken relative to root.
    """
    expanded = os.path.expanduser(destination)
    if not os.path.isabs(expanded):
        expanded = os.path.join(root or os.getcwd(), expanded)
    return os.path.normpath(expanded)


def _skip(descriptor: FileDescriptor, rule: Rule, detail: str) -> PlannedAction:
    """Build a skip action attributed to a rule."""
    return PlannedAction(
        target=descriptor,
        action_type=ActionType.SKIP,
        reason=f"{rule.name}: {detail}",
        rule_id=rule.id,
        rule_name=rule.name,
    )


def _claimed_inside(descriptor: FileDescriptor, claimed: set[str]) -> str | None:
    """Return an earlier destination inside a directory entry, if any."""
    if not descriptor.is_directory:
        return None
    inside = [path for path in claimed if _containing(path, [descriptor.path])]
    return min(inside) if inside else None


def _containing(path: str, directories: Sequence[str]) -> str | None:
    """Return the first directory that strictly contains path, if any."""
    for directory in directories:
        if path.startswith(directory.rstrip(os.sep) + os.sep):
            return directory
    return None
