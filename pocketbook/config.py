"""Configuration file management for pocketbook."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "pocketbook" / "config.toml"


def get_default_data_dir() -> Path:
    """Get the default directory for stored ledger documents (XDG compliant)."""
    return get_xdg_data_home() / "pocketbook"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    data_dir: Path
    autosave: bool = True
    currency: str = "¥"
    log_level: str = "WARNING"


def default_config() -> dict[str, Any]:
    return {
        "data_dir": str(get_default_data_dir()),
        "autosave": True,
        "currency": "¥",
        "log_level": "WARNING",
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    save_config(default_config(), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def load_settings(config_path: Path | None = None) -> Settings:
    """Resolve settings from the config file, falling back to defaults.

    A missing config file is not an error; every key has a default.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Settings with any configured values applied.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}

    data_dir = config.get("data_dir")
    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else get_default_data_dir(),
        autosave=bool(config.get("autosave", True)),
        currency=str(config.get("currency", "¥")),
        log_level=str(config.get("log_level", "WARNING")).upper(),
    )
