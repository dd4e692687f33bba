"""Organizing session: foreground state plus background workers.

The session owns the rule list, the current scan result, plan and
execution log. Blocking filesystem work (scan, execute, undo) is handed
to a worker pool; each submission returns a Future that resolves once,
with the complete result. State is only updated by the foreground
methods after a result has been received.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, TypeVar

from tidyctl.core.errors import OperationInProgressError, TidyError
from tidyctl.core.executor import ExecutionEngine
from tidyctl.core.paths import normalize_root
from tidyctl.core.planner import Planner
from tidyctl.core.scanner import DirectoryScanner
from tidyctl.core.staleness import StalenessTracker
from tidyctl.core.undo import UndoEngine
from tidyctl.models.execution import ExecutionLog
from tidyctl.models.plan import ActionPlan
from tidyctl.models.rule import Rule
from tidyctl.models.scan_result import ScanResult
from tidyctl.models.staleness import ScanStalenessState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrganizerSession:
    """Coordinates scanning, planning, execution and undo for one user.

    Only one of scan, execute or undo may be in flight for a given root
    at a time; a second submission raises OperationInProgressError.

    Example:
        >>> with OrganizerSession(rules) as session:
        ...     session.scan("~/Downloads")
        ...     plan = session.create_plan()
        ...     log = session.execute(plan)
        ...     session.undo(log)
    """

    def __init__(
        self,
        rules: Sequence[Rule] = (),
        *,
        scanner: DirectoryScanner | None = None,
        planner: Planner | None = None,
        executor: ExecutionEngine | None = None,
        undo_engine: UndoEngine | None = None,
        tracker: StalenessTracker | None = None,
        max_workers: int = 1,
    ) -> None:
        self._rules: tuple[Rule, ...] = ()
        self.set_rules(rules)

        self._scanner = scanner or DirectoryScanner()
        self._planner = planner or Planner()
        self._executor = executor or ExecutionEngine()
        self._undo_engine = undo_engine or UndoEngine()
        self._tracker = tracker or StalenessTracker()

        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tidyctl")
        self._in_flight: dict[str, Future[Any]] = {}
        self._lock = threading.Lock()

        self._scan_result: ScanResult | None = None
        self._plan: ActionPlan | None = None
        self._log: ExecutionLog | None = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Rules in evaluation order."""
        return self._rules

    def set_rules(self, rules: Sequence[Rule]) -> None:
        """Replace the rule list.

        Raises:
            ValueError: If two rules share an ID.
        """
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                msg = f"Duplicate rule ID: {rule.id}"
                raise ValueError(msg)
            seen.add(rule.id)
        self._rules = tuple(rules)

    @property
    def tracker(self) -> StalenessTracker:
        """Staleness tracker for the roots scanned in this session."""
        return self._tracker

    @property
    def scan_result(self) -> ScanResult | None:
        """Result of the most recent scan."""
        return self._scan_result

    @property
    def plan(self) -> ActionPlan | None:
        """Plan awaiting review, if any."""
        return self._plan

    @property
    def log(self) -> ExecutionLog | None:
        """Log of the most recent execution, if any."""
        return self._log

    # -------------------------------------------------------------------------
    # Background submissions
    # -------------------------------------------------------------------------

    def submit_scan(self, root: str | Path) -> Future[ScanResult]:
        """Start scanning root on the worker pool."""
        self._tracker.register_root(root)
        return self._submit(str(root), self._scanner.scan, root)

    def submit_execute(self, plan: ActionPlan) -> Future[ExecutionLog]:
        """Start executing plan on the worker pool."""
        return self._submit(plan.root or "", self._executor.execute, plan)

    def submit_undo(self, log: ExecutionLog) -> Future[ExecutionLog]:
        """Start undoing log on the worker pool."""
        return self._submit(log.root or "", self._undo_engine.undo, log)

    def _submit(self, root: str, fn: Callable[..., T], *args: Any) -> Future[T]:
        """Submit work for a root, refusing overlapping operations."""
        key = normalize_root(root) if root else ""
        with self._lock:
            running = self._in_flight.get(key)
            if running is not None and not running.done():
                msg = f"An operation is already running for {key or 'this session'}"
                raise OperationInProgressError(msg)
            future = self._pool.submit(fn, *args)
            self._in_flight[key] = future
        return future

    # -------------------------------------------------------------------------
    # Foreground operations
    # -------------------------------------------------------------------------

    def scan(self, root: str | Path) -> ScanResult:
        """Scan root and make the result current.

        A new scan discards the previous plan and log.

        Raises:
            InvalidRootError: If root is not a directory.
            OperationInProgressError: If root is busy.
        """
        result = self.submit_scan(root).result()
        self._scan_result = result
        self._plan = None
        self._log = None
        self._tracker.mark_scan_completed(result.root, result.completed)
        logger.debug("Scan of %s complete: %d entries", result.root, len(result))
        return result

    def create_plan(self) -> ActionPlan:
        """Plan the current scan result against the rules.

        Raises:
            TidyError: If nothing was scanned yet.
        """
        if self._scan_result is None:
            msg = "Nothing to plan: scan a folder first"
            raise TidyError(msg)
        self._plan = self._planner.plan(
            self._scan_result.files,
            self._rules,
            root=self._scan_result.root,
        )
        return self._plan

    def discard_plan(self) -> None:
        """Drop the plan without touching the filesystem."""
        self._plan = None

    def execute(self, plan: ActionPlan | None = None) -> ExecutionLog:
        """Execute a plan (the current one by default) and keep its log.

        Raises:
            TidyError: If there is no plan to execute.
            OperationInProgressError: If the plan's root is busy.
        """
        target = plan if plan is not None else self._plan
        if target is None:
            msg = "Nothing to execute: create a plan first"
            raise TidyError(msg)
        log = self.submit_execute(target).result()
        self._log = log
        self._plan = None
        return log

    def undo(self, log: ExecutionLog | None = None) -> ExecutionLog:
        """Undo a log (the current one by default).

        Raises:
            TidyError: If there is no log to undo.
            NotReversibleError: If the log cannot be undone.
        """
        target = log if log is not None else self._log
        if target is None:
            msg = "Nothing to undo: no execution in this session"
            raise TidyError(msg)
        result = self.submit_undo(target).result()
        if target is self._log:
            self._log = None
        return result

    def staleness(self, root: str | Path | None = None) -> ScanStalenessState | None:
        """Staleness of a root (the current scan's root by default)."""
        if root is None:
            if self._scan_result is None:
                return None
            root = self._scan_result.root
        return self._tracker.staleness(root)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Wait for running work and release the worker pool."""
        self._pool.shutdown(wait=True)

    def __enter__(self) -> OrganizerSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
