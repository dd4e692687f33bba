"""Scan staleness models."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class StalenessLevel(str, Enum):
    """How likely a previous scan still reflects the filesystem.

    Attributes:
        FRESH: Recently scanned and the root has not changed since.
        POSSIBLY_STALE: No observed change, but the scan is getting old.
        STALE: The root changed after the scan, or the scan is old.
    """

    FRESH = "fresh"
    POSSIBLY_STALE = "possibly_stale"
    STALE = "stale"


@dataclass(frozen=True, slots=True)
class ScanStalenessState:
    """Derived freshness of the last scan of one root.

    Attributes:
        root: Root directory path.
        last_scan: When the last scan of this root completed.
        level: Derived staleness level.
        elapsed: Time since the last scan at the moment of evaluation.
        root_modified: Modification time of the root directory itself,
            None when it could not be read.
    """

    root: str
    last_scan: datetime
    level: StalenessLevel
    elapsed: timedelta
    root_modified: datetime | None = None

    @property
    def is_fresh(self) -> bool:
        """Check if the scan is considered fresh."""
        return self.level == StalenessLevel.FRESH
