"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
from tidyctl.core.trash import Trash
from tidyctl.models.descriptor import FileDescriptor, split_extension

EPOCH = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def make_descriptor(
    path: str,
    *,
    is_directory: bool = False,
    size_bytes: int | None = 100,
    created: datetime = EPOCH,
    modified: datetime = EPOCH,
) -> FileDescriptor:
    """Build a FileDescriptor without touching the filesystem."""
    name = Path(path).name
    return FileDescriptor(
        path=path,
        name=name,
        extension=split_extension(name, is_directory),
        is_directory=is_directory,
        size_bytes=None if is_directory else size_bytes,
        created=created,
        modified=modified,
    )


@pytest.fixture
def descriptor_factory() -> Callable[..., FileDescriptor]:
    """Factory for in-memory descriptors."""
    return make_descriptor


@pytest.fixture
def trash(tmp_path: Path) -> Trash:
    """Trash rooted in a temporary directory."""
    return Trash(tmp_path / "Trash")


@pytest.fixture
def xdg_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every XDG base directory into tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


@pytest.fixture
def downloads(tmp_path: Path) -> Path:
    """A small directory tree resembling a downloads folder.

    Layout:
        downloads/
            invoice.PDF
            notes.txt
            photos/
                beach.jpg
            report.pdf
    """
    root = tmp_path / "downloads"
    (root / "photos").mkdir(parents=True)
    (root / "invoice.PDF").write_bytes(b"%PDF-invoice")
    (root / "notes.txt").write_text("remember the milk")
    (root / "photos" / "beach.jpg").write_bytes(b"\xff\xd8jpeg")
    (root / "report.pdf").write_bytes(b"%PDF-report")
    return root
