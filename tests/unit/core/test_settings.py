"""Unit tests for settings loading and saving."""

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError
from tidyctl.core.planner import DirectoryPolicy
from tidyctl.core.settings import Settings, SettingsError, load_settings, save_settings


class TestSettingsModel:
    """Tests for the Settings model."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.fresh_threshold == timedelta(minutes=5)
        assert settings.stale_threshold == timedelta(minutes=60)
        assert settings.directory_policy == DirectoryPolicy.MOVE_AS_UNIT
        assert settings.trash_path is None
        assert settings.include_hidden

    def test_fresh_cannot_exceed_stale(self) -> None:
        with pytest.raises(ValidationError, match="fresh_minutes cannot exceed"):
            Settings(fresh_minutes=90, stale_minutes=60)

    def test_stale_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(fresh_minutes=0, stale_minutes=0)

    def test_trash_path_expands_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", "/home/tester")
        assert Settings(trash_dir="~/.trash").trash_path == Path("/home/tester/.trash")


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path / "config.toml") == Settings()

    def test_partial_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('stale_minutes = 120\ndirectory_policy = "skip"\n')

        settings = load_settings(path)

        assert settings.stale_minutes == 120
        assert settings.fresh_minutes == 5
        assert settings.directory_policy == DirectoryPolicy.SKIP

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("stale_minutes = ")
        with pytest.raises(SettingsError, match="Invalid TOML"):
            load_settings(path)

    @pytest.mark.parametrize(
        "content",
        [
            "unknown_key = 1\n",
            'directory_policy = "flatten"\n',
            "fresh_minutes = -1\n",
            'include_hidden = "maybe"\n',
        ],
    )
    def test_invalid_content(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "config.toml"
        path.write_text(content)
        with pytest.raises(SettingsError, match="Invalid settings"):
            load_settings(path)

    def test_default_path(self, xdg_home: Path) -> None:
        path = xdg_home / "config" / "tidyctl" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("include_hidden = false\n")

        assert not load_settings().include_hidden


class TestSaveSettings:
    """Tests for save_settings."""

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        settings = Settings(
            fresh_minutes=1,
            stale_minutes=10,
            directory_policy=DirectoryPolicy.SKIP,
            trash_dir="/tmp/trash",
            include_hidden=False,
        )

        save_settings(settings, path)

        assert load_settings(path) == settings

    def test_only_non_defaults_written(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        save_settings(Settings(stale_minutes=30), path)
        assert path.read_text().strip() == "stale_minutes = 30"
