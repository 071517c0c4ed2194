# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and data root resolution for Termfolio.

Handles:
- Data root resolution (TERMFOLIO_DATA_HOME, ~/.local/share)
- Packaged YAML defaults loading (termfolio/defaults/*.yaml)
- User override file merged over the packaged system.yaml
- ANSI coloring constants + UI_CLEAR semantic sentinel
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

# -----------------------
# UI + branding constants
# -----------------------

ANSI_COLORS: dict[str, str] = {
    "cyan": "\033[38;5;69;1m",
    "pink": "\033[38;5;169;1m",
    "magenta": "\033[38;5;126;1m",
    "yellow": "\033[38;5;226;1m",
    "orange": "\033[38;2;255;165;1;1m",
    "reset": "\033[0m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "red": "\033[31m",
}

# Entry kind -> ANSI color name (plain, non prompt_toolkit output)
KIND_COLORS: dict[str, str] = {
    "input": "cyan",
    "output": "reset",
    "error": "red",
    "info": "yellow",
    "success": "green",
    "warning": "orange",
}

# Semantic UI intent for clear screen operations
UI_CLEAR = "__UI_CLEAR__"

CONFIG_ENV = "TERMFOLIO_CONFIG"
DATA_HOME_ENV = "TERMFOLIO_DATA_HOME"


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def system(self) -> dict[str, Any]:
        return self._config.get("system", {})

    @property
    def commands(self) -> dict[str, Any]:
        return self._config.get("commands", {})

    @property
    def profile(self) -> dict[str, Any]:
        return self._config.get("profile", {})

    @property
    def timings(self) -> dict[str, Any]:
        return self._config.get("timings", {})

    @property
    def limits(self) -> dict[str, Any]:
        return self._config.get("limits", {})

    @property
    def ui(self) -> dict[str, Any]:
        ui_cfg = self._config.get("ui", {})
        return ui_cfg if isinstance(ui_cfg, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("ui.theme.style", {}) -> dict style mapping
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur


# -----------------------
# Data root helpers
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for Termfolio.

    Resolution order:
    1. TERMFOLIO_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)
    """
    data_home = os.getenv(DATA_HOME_ENV)
    if data_home:
        root = Path(data_home)
    else:
        root = Path.home() / ".local" / "share"

    root.mkdir(parents=True, exist_ok=True)
    return root


def logs_dir(data_root: Path) -> Path:
    """<data_root>/termfolio/logs"""
    return data_root / "termfolio" / "logs"


def user_config_path(data_root: Path) -> Path:
    """<data_root>/termfolio/config.yaml"""
    return data_root / "termfolio" / "config.yaml"


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("termfolio.defaults")
    )  # type: ignore[arg-type]


def _load_yaml_mapping(path: Path, label: str) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{label} must load to a mapping/dict.")
    return data


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from termfolio/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )
    return _load_yaml_mapping(path, f"Defaults YAML {filename}")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of base with override merged in (dicts recursively)."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def resolve_user_config(explicit: Path | None = None) -> Path | None:
    """Locate the user override file.

    Resolution order:
    1. explicit path (from --config)
    2. TERMFOLIO_CONFIG environment variable
    3. <data_root>/termfolio/config.yaml, if it exists
    """
    if explicit is not None:
        return explicit

    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()

    candidate = user_config_path(get_data_root())
    if candidate.exists():
        return candidate
    return None


def load_system_config(path: Path | None = None) -> YAMLConfig:
    """
    Load system.yaml from packaged defaults, merge the user override file
    over it and return a YAMLConfig wrapper.
    """
    data = load_defaults_yaml("system.yaml")

    override_path = resolve_user_config(path)
    if override_path is not None:
        if not override_path.exists():
            raise FileNotFoundError(f"Config file not found: {override_path}")
        override = _load_yaml_mapping(
            override_path, f"Config file {override_path}"
        )
        data = deep_merge(data, override)

    return YAMLConfig(data)


def load_catalog_data(cfg: YAMLConfig | None = None) -> dict[str, Any]:
    """Load the content catalog mapping.

    Uses ``catalog.path`` from config when set, else packaged catalog.yaml.
    """
    custom = cfg.get_path("catalog.path") if cfg is not None else None
    if custom:
        path = Path(str(custom)).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {path}")
        return _load_yaml_mapping(path, f"Catalog file {path}")
    return load_defaults_yaml("catalog.yaml")
