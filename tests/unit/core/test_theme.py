"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path
from unittest.mock import patch

import pytest
import tidyctl.core.theme as theme_module
from pydantic import BaseModel
from rich.theme import Theme
from tidyctl.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_rich_theme,
    get_theme,
    get_user_theme_path,
    load_theme,
    reload_theme,
)


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.action_move == "#0e8ac8"
        assert colors.stale == "#f53263"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts #RGB and #RRGGBB codes."""
        colors = ThemeColors(text="#AABBCC", muted="#abc")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"

    @pytest.mark.parametrize("value", ["c1ff62", "#ff", "#gggggg", "#12345"])
    def test_invalid_hex(self, value: str) -> None:
        with pytest.raises(ValueError, match="expected #RGB or #RRGGBB"):
            ThemeColors(action_copy=value)

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(package_manual="#ffffff")  # type: ignore[call-arg]

    def test_fields_do_not_shadow_model_methods(self) -> None:
        """No color name collides with a BaseModel attribute."""
        assert not set(ThemeColors.model_fields) & set(dir(BaseModel))


class TestLoadTomlColors:
    """Tests for _load_toml_colors internal function."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\nmove = "#000000"\ncount = 3\n')

        result = _load_toml_colors(theme_file)

        assert result == {"move": "#000000"}

    def test_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_toml_colors(tmp_path / "nonexistent.toml") is None

    def test_returns_none_for_invalid_toml(self, tmp_path: Path) -> None:
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("not valid [ toml syntax")

        assert _load_toml_colors(theme_file) is None

    def test_returns_empty_dict_for_missing_colors_section(self, tmp_path: Path) -> None:
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[other]\nkey = "value"\n')

        assert _load_toml_colors(theme_file) == {}


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_bundled_theme_matches_defaults(self, xdg_home: Path) -> None:
        """The bundled theme file defines the model defaults."""
        assert load_theme() == ThemeColors()

    def test_user_theme_overrides_bundled(self, tmp_path: Path) -> None:
        """User theme overrides only the colors it names."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\naction_delete = "#ff0000"\n')

        with patch("tidyctl.core.theme.get_user_theme_path", return_value=user_theme):
            colors = load_theme()

        assert colors.action_delete == "#ff0000"
        assert colors.action_move == "#0e8ac8"

    def test_invalid_user_theme_syntax(self, tmp_path: Path) -> None:
        """Unparseable user themes are ignored."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text("invalid toml [[[")

        with patch("tidyctl.core.theme.get_user_theme_path", return_value=user_theme):
            colors = load_theme()

        assert colors == ThemeColors()

    def test_invalid_user_color_falls_back(self, tmp_path: Path) -> None:
        """A bad color value falls back to the defaults."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\naction_move = "blue"\n')

        with patch("tidyctl.core.theme.get_user_theme_path", return_value=user_theme):
            colors = load_theme()

        assert colors.action_move == ThemeColors().action_move


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_returns_rich_theme(self) -> None:
        assert isinstance(get_rich_theme(ThemeColors()), Theme)

    def test_includes_action_and_staleness_styles(self) -> None:
        """Every action type and staleness level has a style."""
        theme = get_rich_theme(ThemeColors())

        for name in ("move", "copy", "delete", "rename", "skip"):
            assert f"action.{name}" in theme.styles
        for name in ("fresh", "possibly_stale", "stale"):
            assert f"staleness.{name}" in theme.styles
        assert "bold_header" in theme.styles
        assert "path" in theme.styles

    def test_uses_provided_colors(self) -> None:
        theme = get_rich_theme(ThemeColors(header="#123456"))
        assert theme.styles["header"].color is not None
        assert theme.styles["header"].color.name == "#123456"


class TestGetTheme:
    """Tests for get_theme caching function."""

    def test_caches_theme(self) -> None:
        """get_theme returns cached instance on subsequent calls."""
        theme_module._cached_theme = None

        assert get_theme() is get_theme()

    def test_reload_creates_new_theme(self) -> None:
        theme_module._cached_theme = None

        original = get_theme()
        reloaded = reload_theme()

        assert reloaded is not original
        assert get_theme() is reloaded


class TestGetUserThemePath:
    """Tests for get_user_theme_path function."""

    def test_returns_xdg_config_path(self, xdg_home: Path) -> None:
        assert get_user_theme_path() == xdg_home / "config" / "tidyctl" / "theme.toml"
