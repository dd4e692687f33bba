"""Scan freshness tracking per root.

The tracker remembers when each root was last scanned and estimates
whether that scan still reflects the filesystem, using the elapsed time
and the root directory's own modification time.
"""

import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from tidyctl.core.paths import normalize_root
from tidyctl.models.staleness import ScanStalenessState, StalenessLevel

logger = logging.getLogger(__name__)

DEFAULT_FRESH_THRESHOLD = timedelta(minutes=5)
DEFAULT_STALE_THRESHOLD = timedelta(minutes=60)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class StalenessTracker:
    """Tracks last-scan times and derives staleness levels.

    Roots are keyed by their absolute path. A registered root that was
    never scanned has no staleness state at all, which callers must
    treat differently from a stale scan.

    Args:
        fresh_threshold: Scans younger than this are fresh (absent changes).
        stale_threshold: Scans older than this are stale.
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        *,
        fresh_threshold: timedelta = DEFAULT_FRESH_THRESHOLD,
        stale_threshold: timedelta = DEFAULT_STALE_THRESHOLD,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if fresh_threshold > stale_threshold:
            msg = "Fresh threshold cannot exceed stale threshold"
            raise ValueError(msg)
        self._fresh_threshold = fresh_threshold
        self._stale_threshold = stale_threshold
        self._clock = clock
        self._last_scans: dict[str, datetime | None] = {}

    def register_root(self, path: str | Path) -> None:
        """Begin tracking a root. Registering twice has no effect."""
        self._last_scans.setdefault(_key(path), None)

    def forget_root(self, path: str | Path) -> None:
        """Stop tracking a root."""
        self._last_scans.pop(_key(path), None)

    @property
    def tracked_roots(self) -> list[str]:
        """Tracked roots in registration order."""
        return list(self._last_scans)

    def mark_scan_completed(self, path: str | Path, at: datetime | None = None) -> None:
        """Record that a scan of root finished.

        Registers the root if needed.

        Args:
            path: Root that was scanned.
            at: Completion time. Defaults to now.
        """
        self._last_scans[_key(path)] = at if at is not None else self._clock()

    def last_scan(self, path: str | Path) -> datetime | None:
        """Return when root was last scanned, or None if never."""
        return self._last_scans.get(_key(path))

    def staleness(self, path: str | Path) -> ScanStalenessState | None:
        """Derive the staleness of the last scan of root.

        Args:
            path: Tracked root.

        Returns:
            ScanStalenessState, or None if the root was never scanned.
        """
        key = _key(path)
        last_scan = self._last_scans.get(key)
        if last_scan is None:
            return None

        elapsed = self._clock() - last_scan
        root_modified = _modification_time(key)

        if root_modified is not None and root_modified > last_scan:
            level = StalenessLevel.STALE
        elif elapsed > self._stale_threshold:
            level = StalenessLevel.STALE
        elif elapsed < self._fresh_threshold:
            level = StalenessLevel.FRESH
        else:
            level = StalenessLevel.POSSIBLY_STALE

        return ScanStalenessState(
            root=key,
            last_scan=last_scan,
            level=level,
            elapsed=elapsed,
            root_modified=root_modified,
        )


def _key(path: str | Path) -> str:
    """Normalize a root path into a tracking key."""
    return normalize_root(path)


def _modification_time(path: str) -> datetime | None:
    """Read a directory's modification time, None if unavailable."""
    try:
        return datetime.fromtimestamp(os.stat(path).st_mtime, tz=UTC)
    except OSError as e:
        logger.debug("Cannot read modification time of %s: %s", path, e)
        return None
