"""Directory scanner producing ordered snapshots of a root.

Walks the whole subtree below a root directory and materializes every
entry (files and directories) as an immutable FileDescriptor. Traversal
is depth-first pre-order with children sorted by name, so the snapshot
order is stable for a given filesystem state.
"""

import logging
import os
import stat
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from tidyctl.core.errors import InvalidRootError
from tidyctl.core.paths import normalize_root
from tidyctl.models.descriptor import FileDescriptor, split_extension
from tidyctl.models.scan_result import ScanResult

logger = logging.getLogger(__name__)


class DirectoryScanner:
    """Scans a root directory into a ScanResult.

    Symbolic links are followed, but a directory is only ever descended
    into once: a guard keyed by canonical (resolved) path stops links
    that lead back into the root or into already visited directories,
    which also breaks link cycles. Entries that cannot be read are left
    out of the result without aborting the scan.

    Args:
        include_hidden: If False, skip entries whose name starts with a dot
            (and everything below hidden directories).
    """

    def __init__(self, *, include_hidden: bool = True) -> None:
        self._include_hidden = include_hidden

    def scan(self, root: str | Path) -> ScanResult:
        """Scan the subtree below root.

        The root itself is not part of the snapshot.

        Args:
            root: Directory to scan.

        Returns:
            ScanResult with descriptors in traversal order.

        Raises:
            InvalidRootError: If root does not exist or is not a directory.
        """
        root_path = Path(normalize_root(root))
        if not root_path.is_dir():
            msg = f"Scan root is not a directory: {root_path}"
            raise InvalidRootError(msg)

        files = tuple(self.walk(root_path))
        logger.debug("Scanned %s: %d entries", root_path, len(files))
        return ScanResult(root=str(root_path), files=files, completed=datetime.now(UTC))

    def walk(self, root: Path) -> Iterator[FileDescriptor]:
        """Yield descriptors for every readable entry below root.

        Real directories are always descended into. A symlink to a
        directory is reported as an entry but only descended into when
        its target lies outside the root and was not visited yet, so
        link cycles terminate and no directory is listed twice.

        Args:
            root: Absolute path of an existing directory.

        Yields:
            FileDescriptor per entry, depth-first pre-order.
        """
        canonical_root = os.path.realpath(root)
        visited: set[str] = {canonical_root}
        stack: list[Iterator[Path]] = [iter(self._list_children(root))]

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            if not self._include_hidden and entry.name.startswith("."):
                continue

            try:
                descriptor = self._describe(entry)
            except OSError as e:
                logger.debug("Skipping unreadable entry %s: %s", entry, e)
                continue

            yield descriptor

            if not descriptor.is_directory:
                continue

            canonical = os.path.realpath(entry)
            seen = canonical in visited or _is_within(canonical, canonical_root)
            if seen and entry.is_symlink():
                logger.debug("Not following directory link %s -> %s", entry, canonical)
                continue

            visited.add(canonical)
            stack.append(iter(self._list_children(entry)))

    @staticmethod
    def _list_children(directory: Path) -> list[Path]:
        """List a directory's children sorted by name.

        Returns an empty list when the directory cannot be read.
        """
        try:
            return sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.debug("Cannot list directory %s: %s", directory, e)
            return []

    @staticmethod
    def _describe(entry: Path) -> FileDescriptor:
        """Build a descriptor from the entry's metadata.

        Follows symlinks, so a broken link raises and is skipped by the
        caller.

        Raises:
            OSError: If the entry's metadata cannot be read.
        """
        st = entry.stat()
        is_directory = stat.S_ISDIR(st.st_mode)
        birth = getattr(st, "st_birthtime", None)
        created = birth if birth is not None else st.st_ctime

        return FileDescriptor(
            path=str(entry),
            name=entry.name,
            extension=split_extension(entry.name, is_directory),
            is_directory=is_directory,
            size_bytes=None if is_directory else st.st_size,
            created=datetime.fromtimestamp(created, tz=UTC),
            modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
        )


def _is_within(path: str, directory: str) -> bool:
    """Check if a canonical path equals or lies below a canonical directory."""
    return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)
