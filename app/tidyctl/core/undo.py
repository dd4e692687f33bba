"""Reversal of previous executions.

The undo engine walks an execution log and reverses every entry that
changed the filesystem. Entries that were skipped or failed have
nothing to reverse and do not appear in the result. Directories the
execution created for a destination are removed again once empty.
Undo logs are themselves final: there is no redo.
"""

import logging
import os
import shutil
from datetime import UTC, datetime
from pathlib import Path

from tidyctl.core.errors import NotReversibleError
from tidyctl.core.executor import remove_empty_dirs
from tidyctl.core.trash import Trash, TrashError
from tidyctl.models.execution import EntryStatus, ExecutionLog, LogEntry, LogKind
from tidyctl.models.plan import ActionType

logger = logging.getLogger(__name__)


class UndoEngine:
    """Reverses the effects recorded in an execution log.

    Entries are processed one at a time, newest first, so that chains
    of dependent actions unwind in the opposite order they were applied.
    A failing entry never stops the remaining ones.
    """

    def __init__(self, trash: Trash | None = None) -> None:
        """Initialize the UndoEngine.

        Args:
            trash: Trash that delete actions were sent to.
        """
        self._trash = trash if trash is not None else Trash()

    def undo(self, log: ExecutionLog) -> ExecutionLog:
        """Reverse every successful, mutating entry of an execution log.

        Args:
            log: Log of a previous (non dry-run) execution.

        Returns:
            Undo log with one entry per reversible entry of ``log``.

        Raises:
            NotReversibleError: If ``log`` is an undo log or a dry-run.
        """
        if log.kind == LogKind.UNDO:
            msg = f"Log {log.id} is an undo log and cannot be undone"
            raise NotReversibleError(msg)
        if log.dry_run:
            msg = f"Log {log.id} is a dry-run; there is nothing to undo"
            raise NotReversibleError(msg)

        started = datetime.now(UTC)
        reversible = [entry for entry in reversed(log.entries) if entry.is_reversible]
        entries = tuple(self._undo_single(entry) for entry in reversible)

        result = ExecutionLog(
            entries=entries,
            kind=LogKind.UNDO,
            root=log.root,
            started=started,
            finished=datetime.now(UTC),
            reverses=log.id,
        )
        logger.info(
            "Undid log %s: %d restored, %d failed",
            log.id,
            result.succeeded,
            result.failed,
        )
        return result

    def _undo_single(self, entry: LogEntry) -> LogEntry:
        """Reverse one log entry.

        Args:
            entry: A successful move, copy, rename or delete entry.

        Returns:
            LogEntry describing the reversal.
        """
        if entry.action_type in (ActionType.MOVE, ActionType.RENAME):
            return self._move_back(entry)
        if entry.action_type == ActionType.COPY:
            return self._remove_copy(entry)
        if entry.action_type == ActionType.DELETE:
            return self._restore(entry)

        return _failed(entry, entry.source, f"Cannot undo {entry.action_type.value} action")

    def _move_back(self, entry: LogEntry) -> LogEntry:
        """Move a moved or renamed entry back to its original path."""
        current = entry.destination
        if current is None or not os.path.lexists(current):
            message = f"Destination no longer exists: {current}"
            return _failed(entry, current or entry.source, message)
        if os.path.lexists(entry.source):
            return _failed(entry, current, f"Original path is occupied: {entry.source}")

        try:
            Path(entry.source).parent.mkdir(parents=True, exist_ok=True)
            shutil.move(current, entry.source)
        except OSError as e:
            logger.warning("Undo %s of %s failed: %s", entry.action_type.value, current, e)
            return _failed(entry, current, str(e))

        remove_empty_dirs(entry.created_dirs)
        logger.info("Restored %s -> %s", current, entry.source)
        return _succeeded(entry, current, entry.source)

    def _remove_copy(self, entry: LogEntry) -> LogEntry:
        """Remove the copy created by a copy action."""
        copy = entry.destination
        if copy is None or not os.path.lexists(copy):
            return _failed(entry, copy or entry.source, f"Copy no longer exists: {copy}")

        try:
            if os.path.isdir(copy) and not os.path.islink(copy):
                shutil.rmtree(copy)
            else:
                os.unlink(copy)
        except OSError as e:
            logger.warning("Undo copy of %s failed: %s", copy, e)
            return _failed(entry, copy, str(e))

        remove_empty_dirs(entry.created_dirs)
        logger.info("Removed copy %s", copy)
        return _succeeded(entry, copy, None)

    def _restore(self, entry: LogEntry) -> LogEntry:
        """Restore a trashed entry to its original path."""
        if entry.trash_path is None:
            return _failed(entry, entry.source, "No trash location recorded")

        try:
            self._trash.restore(entry.trash_path, entry.source)
        except TrashError as e:
            logger.warning("Undo delete of %s failed: %s", entry.source, e)
            return _failed(entry, entry.trash_path, str(e))

        logger.info("Restored %s from trash", entry.source)
        return _succeeded(entry, entry.trash_path, entry.source)


def _succeeded(entry: LogEntry, source: str, destination: str | None) -> LogEntry:
    """Build a successful undo entry."""
    return LogEntry(
        action_id=entry.action_id,
        action_type=entry.action_type,
        source=source,
        status=EntryStatus.SUCCESS,
        destination=destination,
    )


def _failed(entry: LogEntry, source: str, message: str) -> LogEntry:
    """Build a failed undo entry."""
    return LogEntry(
        action_id=entry.action_id,
        action_type=entry.action_type,
        source=source,
        status=EntryStatus.FAILED,
        message=message,
    )
