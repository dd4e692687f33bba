"""XDG-compliant path management for tidyctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state, and data storage.

XDG defaults:
- Config: ~/.config/tidyctl/
- State: ~/.local/state/tidyctl/
- Trash: ~/.local/share/Trash/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "tidyctl"


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_DATA_HOME").
        default_subdir: Default subdirectory under home (e.g., ".local/share").

    Returns:
        Path to the XDG base directory (not application-specific).
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get the application-specific XDG directory."""
    return _get_xdg_base(env_var, default_subdir) / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/tidyctl/ (or XDG_CONFIG_HOME/tidyctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the execution history and the last-scan record
    that should persist between runs but is not configuration.

    Returns:
        Path to ~/.local/state/tidyctl/ (or XDG_STATE_HOME/tidyctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_rules_path() -> Path:
    """Get the default rules file path.

    Returns:
        Path to ~/.config/tidyctl/rules.toml.
    """
    return get_config_dir() / "rules.toml"


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/tidyctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_trash_dir() -> Path:
    """Get the default trash directory.

    Uses the freedesktop.org home trash so trashed entries show up in
    the desktop's trash can.

    Returns:
        Path to ~/.local/share/Trash (or XDG_DATA_HOME/Trash).
    """
    return _get_xdg_base("XDG_DATA_HOME", ".local/share") / "Trash"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


def normalize_root(path: str | Path) -> str:
    """Normalize a user-supplied root into an absolute path string.

    Expands ``~`` and collapses ``..`` without resolving symlinks, so
    the same directory always maps to the same key.
    """
    return os.path.abspath(os.path.expanduser(str(path)))
