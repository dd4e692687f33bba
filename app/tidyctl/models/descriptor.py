"""File descriptor model for scanned filesystem entries.

This module defines the immutable snapshot of a single filesystem entry
as seen by the scanner. Descriptors are never re-queried: they describe
the entry at the moment the scan visited it.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class FileDescriptor:
    """Point-in-time snapshot of one filesystem entry.

    Attributes:
        path: Absolute path of the entry (identity).
        name: File or directory name including any extension.
        extension: Lower-cased extension without the dot ("" if none).
            Always empty for directories.
        is_directory: Whether the entry is a directory.
        size_bytes: Size in bytes, None for directories.
        created: Creation timestamp (falls back to inode change time
            where the platform has no birth time).
        modified: Last modification timestamp.
    """

    path: str
    name: str
    extension: str
    is_directory: bool
    size_bytes: int | None
    created: datetime
    modified: datetime

    def __post_init__(self) -> None:
        """Validate descriptor data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if not self.name:
            msg = "Name cannot be empty"
            raise ValueError(msg)
        if self.size_bytes is not None and self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def stem(self) -> str:
        """Name without its extension."""
        if not self.extension:
            return self.name
        return self.name[: -(len(self.extension) + 1)]

    @property
    def suffix(self) -> str:
        """Extension as it appears in the name, with the dot and original case."""
        if not self.extension:
            return ""
        return self.name[-(len(self.extension) + 1) :]

    @property
    def parent(self) -> str:
        """Absolute path of the containing directory."""
        return str(Path(self.path).parent)


def split_extension(name: str, is_directory: bool) -> str:
    """Derive the matching extension for an entry name.

    Hidden files without a further dot (e.g. ".bashrc") have no extension.

    Args:
        name: Entry name.
        is_directory: Directories never carry an extension.

    Returns:
        Lower-cased extension without the dot, or "".
    """
    if is_directory:
        return ""
    suffix = Path(name).suffix
    return suffix[1:].lower() if suffix else ""
