"""User settings for tidyctl.

Settings are stored in ~/.config/tidyctl/config.toml. Every key is
optional; a missing file means all defaults.
"""

import os
import tomllib
from datetime import timedelta
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tidyctl.core.errors import TidyError
from tidyctl.core.paths import get_settings_path
from tidyctl.core.planner import DirectoryPolicy


class SettingsError(TidyError):
    """Raised when the settings file cannot be read, parsed or validated."""


class Settings(BaseModel):
    """Engine configuration.

    Attributes:
        fresh_minutes: Scans younger than this are considered fresh.
        stale_minutes: Scans older than this are considered stale.
        directory_policy: How move and copy outcomes treat directories.
        trash_dir: Trash location. None uses the XDG home trash.
        include_hidden: Whether scans include dot-files.
    """

    model_config = ConfigDict(extra="forbid")

    fresh_minutes: Annotated[
        int,
        Field(ge=0, description="Minutes a scan stays fresh"),
    ] = 5
    stale_minutes: Annotated[
        int,
        Field(ge=1, description="Minutes after which a scan is stale"),
    ] = 60
    directory_policy: Annotated[
        DirectoryPolicy,
        Field(description="Treatment of directories matched by move/copy rules"),
    ] = DirectoryPolicy.MOVE_AS_UNIT
    trash_dir: Annotated[
        str | None,
        Field(description="Trash directory (None = XDG home trash)"),
    ] = None
    include_hidden: Annotated[
        bool,
        Field(description="Include hidden entries in scans"),
    ] = True

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.fresh_minutes > self.stale_minutes:
            msg = "fresh_minutes cannot exceed stale_minutes"
            raise ValueError(msg)
        return self

    @property
    def fresh_threshold(self) -> timedelta:
        return timedelta(minutes=self.fresh_minutes)

    @property
    def stale_threshold(self) -> timedelta:
        return timedelta(minutes=self.stale_minutes)

    @property
    def trash_path(self) -> Path | None:
        """Expanded trash directory, or None for the default."""
        if self.trash_dir is None:
            return None
        return Path(self.trash_dir).expanduser()


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings; defaults if the file doesn't exist.

    Raises:
        SettingsError: If the file cannot be read, parsed or validated.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings atomically, writing only non-default values.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    data = settings.model_dump(mode="json", exclude_defaults=True, exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path
