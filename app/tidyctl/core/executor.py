"""Plan execution against the filesystem.

The execution engine processes a plan's actions strictly in order, one
at a time, and records exactly one log entry per action. Filesystem
errors are captured in the log and never abort the batch.
"""

import logging
import os
import shutil
from datetime import UTC, datetime
from pathlib import Path

from tidyctl.core.trash import Trash, TrashError
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import ActionPlan, ActionType, PlannedAction

logger = logging.getLogger(__name__)


class ExecutionEngine:
    """Applies action plans to the filesystem.

    The engine holds no state between calls and can be shared.

    Attributes:
        _trash: Trash used for delete actions.
        _dry_run: If True, record what would happen without touching files.
    """

    def __init__(self, trash: Trash | None = None, dry_run: bool = False) -> None:
        """Initialize the ExecutionEngine.

        Args:
            trash: Trash for delete actions. Defaults to the XDG home trash.
            dry_run: If True, simulate actions without modifying the filesystem.
        """
        self._trash = trash if trash is not None else Trash()
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Check if the engine is in dry-run mode."""
        return self._dry_run

    def execute(self, plan: ActionPlan) -> ExecutionLog:
        """Execute every action of the plan in order.

        Args:
            plan: The plan to apply.

        Returns:
            ExecutionLog with one entry per planned action, in plan order.
        """
        started = datetime.now(UTC)
        entries = tuple(self._execute_single(action) for action in plan.actions)
        log = ExecutionLog(
            entries=entries,
            kind=LogKind.EXECUTION,
            root=plan.root,
            started=started,
            finished=datetime.now(UTC),
            dry_run=self._dry_run,
        )
        logger.info(
            "Executed plan %s: %d succeeded, %d skipped, %d failed",
            plan.id,
            log.succeeded,
            log.skipped,
            log.failed,
        )
        return log

    def _execute_single(self, action: PlannedAction) -> LogEntry:
        """Execute one action and describe the result.

        Args:
            action: The action to apply.

        Returns:
            LogEntry for the action.
        """
        if action.action_type == ActionType.SKIP:
            return _entry(action, EntryStatus.SKIPPED, message=action.reason)

        if self._dry_run:
            logger.info("Dry-run: would %s %s", action.action_type.value, action.source)
            return _entry(
                action,
                EntryStatus.SUCCESS,
                destination=action.destination,
                message="dry-run",
            )

        if not os.path.lexists(action.source):
            return _failed(action, f"Source does not exist: {action.source}")

        created: tuple[str, ...] = ()
        try:
            if action.action_type == ActionType.DELETE:
                trashed = self._trash.trash(action.source)
                logger.info("Trashed %s", action.source)
                return _entry(action, EntryStatus.SUCCESS, trash_path=str(trashed))

            destination = action.destination
            if destination is None:
                return _failed(action, f"{action.action_type.value} action has no destination")
            if os.path.lexists(destination):
                return _failed(action, f"Destination already exists: {destination}")

            if action.action_type == ActionType.RENAME:
                os.rename(action.source, destination)
            elif action.action_type in (ActionType.MOVE, ActionType.COPY):
                created = make_parents(destination)
                try:
                    if action.action_type == ActionType.MOVE:
                        shutil.move(action.source, destination)
                    else:
                        _copy(action.source, destination)
                except OSError:
                    remove_empty_dirs(created)
                    raise
            else:
                return _failed(action, f"Unsupported action type: {action.action_type.value}")

        except (OSError, TrashError) as e:
            logger.warning("%s %s failed: %s", action.action_type.value, action.source, e)
            return _failed(action, str(e))

        logger.info("%s %s -> %s", action.action_type.value, action.source, destination)
        return _entry(action, EntryStatus.SUCCESS, destination=destination, created_dirs=created)


def make_parents(path: str) -> tuple[str, ...]:
    """Create the missing parent directories of path.

    Returns:
        The directories that did not exist before, shallowest first.
    """
    missing: list[str] = []
    parent = Path(path).parent
    while not os.path.lexists(parent):
        missing.append(str(parent))
        parent = parent.parent
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return tuple(reversed(missing))


def remove_empty_dirs(directories: tuple[str, ...]) -> None:
    """Remove directories created by make_parents, deepest first.

    Stops at the first directory that is no longer empty or cannot be
    removed, since its parents cannot be empty either.
    """
    for directory in reversed(directories):
        try:
            os.rmdir(directory)
        except OSError as e:
            logger.debug("Keeping directory %s: %s", directory, e)
            return


def _copy(source: str, destination: str) -> None:
    """Copy a file or a whole directory tree, preserving metadata."""
    if os.path.isdir(source) and not os.path.islink(source):
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination, follow_symlinks=False)


def _entry(
    action: PlannedAction,
    status: EntryStatus,
    destination: str | None = None,
    message: str | None = None,
    trash_path: str | None = None,
    created_dirs: tuple[str, ...] = (),
) -> LogEntry:
    """Build a log entry for an action."""
    return LogEntry(
        action_id=action.id,
        action_type=action.action_type,
        source=action.source,
        status=status,
        destination=destination,
        message=message,
        trash_path=trash_path,
        created_dirs=created_dirs,
    )


def _failed(action: PlannedAction, message: str) -> LogEntry:
    """Build a failed log entry for an action."""
    return _entry(action, EntryStatus.FAILED, message=message)
