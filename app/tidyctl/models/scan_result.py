"""Scan result model.

This module defines the ordered snapshot produced by one scan of a
root directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tidyctl.models.descriptor import FileDescriptor


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Ordered snapshot of every entry under a root.

    Attributes:
        root: Absolute path of the scanned root directory.
        files: Descriptors in traversal order.
        completed: When the traversal finished.
    """

    root: str
    files: tuple[FileDescriptor, ...]
    completed: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __len__(self) -> int:
        return len(self.files)

    @property
    def file_count(self) -> int:
        """Number of non-directory entries."""
        return sum(1 for f in self.files if not f.is_directory)

    @property
    def directory_count(self) -> int:
        """Number of directory entries."""
        return sum(1 for f in self.files if f.is_directory)

    @property
    def total_size(self) -> int:
        """Sum of all file sizes in bytes."""
        return sum(f.size_bytes or 0 for f in self.files)

    @property
    def summary(self) -> dict[str, int]:
        """Entry counts for display and export."""
        return {
            "total": len(self.files),
            "files": self.file_count,
            "directories": self.directory_count,
            "size_bytes": self.total_size,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "root": self.root,
            "completed": self.completed.isoformat(),
            "summary": self.summary,
            "files": [_descriptor_to_dict(f) for f in self.files],
        }


def _descriptor_to_dict(descriptor: FileDescriptor) -> dict[str, Any]:
    """Convert a FileDescriptor to a dictionary.

    Args:
        descriptor: The descriptor to convert.

    Returns:
        Dictionary representation of the descriptor.
    """
    return {
        "path": descriptor.path,
        "name": descriptor.name,
        "extension": descriptor.extension,
        "is_directory": descriptor.is_directory,
        "size_bytes": descriptor.size_bytes,
        "created": descriptor.created.isoformat(),
        "modified": descriptor.modified.isoformat(),
    }
