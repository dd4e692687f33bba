"""Exception hierarchy for the organizing engine.

Per-entry filesystem failures are never raised: they are recorded in
logs. These exceptions cover caller errors and misuse only.
"""


class TidyError(Exception):
    """Base exception for all tidyctl errors."""


class InvalidRootError(TidyError):
    """Raised when a scan root does not exist or is not a directory."""


class NotReversibleError(TidyError):
    """Raised when asked to undo something that cannot be undone."""


class OperationInProgressError(TidyError):
    """Raised when a scan, execution or undo is already running for a root."""
