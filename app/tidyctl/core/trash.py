"""Recoverable trash for delete actions.

Implements the home trash layout of the freedesktop.org Trash
specification: trashed entries live in ``files/`` and each has a
matching ``info/<name>.trashinfo`` recording its original location and
deletion date. Trashing returns the location inside the trash so the
entry can be restored exactly.
"""

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

from tidyctl.core.errors import TidyError
from tidyctl.core.paths import get_trash_dir

logger = logging.getLogger(__name__)

_INFO_SUFFIX = ".trashinfo"


class TrashError(TidyError):
    """Raised when an entry cannot be trashed or restored."""


class Trash:
    """A trash directory that can take entries in and give them back.

    Entries on another filesystem are copied into the trash and then removed,
    so trashing a large tree across volumes costs a full copy of it.

    Args:
        trash_dir: Root of the trash. Defaults to the XDG home trash.
    """

    def __init__(self, trash_dir: Path | None = None) -> None:
        self._trash_dir = trash_dir if trash_dir is not None else get_trash_dir()

    @property
    def trash_dir(self) -> Path:
        """Root directory of the trash."""
        return self._trash_dir

    @property
    def files_dir(self) -> Path:
        """Directory holding trashed entries."""
        return self._trash_dir / "files"

    @property
    def info_dir(self) -> Path:
        """Directory holding .trashinfo records."""
        return self._trash_dir / "info"

    def trash(self, path: str | Path) -> Path:
        """Move an entry into the trash.

        Args:
            path: Entry to trash (file, directory or symlink).

        Returns:
            Location of the entry inside the trash.

        Raises:
            TrashError: If the entry does not exist or cannot be moved.
        """
        source = Path(path).absolute()
        if not os.path.lexists(source):
            msg = f"Path does not exist: {source}"
            raise TrashError(msg)

        try:
            self.files_dir.mkdir(parents=True, exist_ok=True)
            self.info_dir.mkdir(parents=True, exist_ok=True)
            name, info_path = self._reserve_info(source)
            target = self.files_dir / name
            try:
                shutil.move(str(source), str(target))
            except OSError:
                info_path.unlink(missing_ok=True)
                raise
        except OSError as e:
            msg = f"Cannot move {source} to trash: {e}"
            raise TrashError(msg) from e

        logger.debug("Trashed %s -> %s", source, target)
        return target

    def restore(self, trashed: str | Path, original: str | Path) -> Path:
        """Move a trashed entry back to its original location.

        Args:
            trashed: Location inside the trash, as returned by trash().
            original: Path to restore to.

        Returns:
            The restored path.

        Raises:
            TrashError: If the trashed entry is gone, the original path is
                occupied, or the move fails.
        """
        trashed_path = Path(trashed)
        original_path = Path(original)

        if not os.path.lexists(trashed_path):
            msg = f"Trashed entry no longer exists: {trashed_path}"
            raise TrashError(msg)
        if os.path.lexists(original_path):
            msg = f"Original path is occupied: {original_path}"
            raise TrashError(msg)

        try:
            original_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(trashed_path), str(original_path))
        except OSError as e:
            msg = f"Cannot restore {trashed_path}: {e}"
            raise TrashError(msg) from e

        (self.info_dir / f"{trashed_path.name}{_INFO_SUFFIX}").unlink(missing_ok=True)
        logger.debug("Restored %s -> %s", trashed_path, original_path)
        return original_path

    def _reserve_info(self, source: Path) -> tuple[str, Path]:
        """Pick a free name in the trash and write its .trashinfo record.

        The info file is created exclusively, which reserves the name.

        Returns:
            Tuple of (name inside files/, path of the info file).
        """
        stem, ext = os.path.splitext(source.name)
        counter = 1
        name = source.name
        while True:
            info_path = self.info_dir / f"{name}{_INFO_SUFFIX}"
            if not os.path.lexists(self.files_dir / name):
                try:
                    with info_path.open("x", encoding="utf-8") as f:
                        f.write(_format_info(source))
                    return name, info_path
                except FileExistsError:
                    pass
            counter += 1
            name = f"{stem}.{counter}{ext}"


def _format_info(source: Path) -> str:
    """Render the .trashinfo content for an entry."""
    deleted = datetime.now().strftime("%Y-%m-%dT%H:%M:%S")
    return f"[Trash Info]\nPath={quote(str(source))}\nDeletionDate={deleted}\n"
