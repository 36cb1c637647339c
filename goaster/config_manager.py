"""Configuration manager for goaster using TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .config import CONFIG_FILE


DEFAULT_CONFIG: Dict[str, Any] = {
    "include_tests": True,
    "workers": 1,
    "gofmt": False,
    "log_level": "WARNING",
}


@dataclass
class LoaderSettings:
    """Knobs for turning a directory into a Module."""

    include_tests: bool = True
    workers: int = 1
    gofmt: bool = False
    log_level: str = "WARNING"


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    path = path or CONFIG_FILE
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError):
        return {}


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load loader/printer configuration from the TOML file.

    The ``[loader]`` and ``[printer]`` sections are merged over
    :data:`DEFAULT_CONFIG`. A missing or unreadable file yields
    the defaults.
    """
    config = DEFAULT_CONFIG.copy()
    full = load_full_config(path)
    config.update(full.get("loader", {}))
    config.update(full.get("printer", {}))
    return config


def load_settings(path: Optional[Path] = None) -> LoaderSettings:
    config = load_config(path)
    return LoaderSettings(
        include_tests=bool(config.get("include_tests", True)),
        workers=max(int(config.get("workers", 1)), 1),
        gofmt=bool(config.get("gofmt", False)),
        log_level=str(config.get("log_level", "WARNING")).upper(),
    )


def save_config(section: str, values: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """Write one section of the config file, preserving the others.

    Returns:
        True if saved successfully, False otherwise
    """
    path = path or CONFIG_FILE
    config = load_full_config(path)
    config[section] = {**config.get(section, {}), **values}
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w") as f:
            toml.dump(config, f)
        return True
    except OSError:
        return False
