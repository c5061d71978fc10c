"""
Shared helpers for locating user-writable config/data directories.
"""
from __future__ import annotations

import os
from pathlib import Path


APP_NAME = "TimezoneBar"


def get_config_dir() -> Path:
    """
    Return a user-writable config directory.
    Priority:
      1) TZBAR_CONFIG_DIR env var (user override)
      2) Windows: LOCALAPPDATA/APPDATA/TimezoneBar
         Others: ~/.tzbar
      3) CWD/tzbar_config (fallback if creation fails)
    """
    env_cfg = os.environ.get("TZBAR_CONFIG_DIR")
    if env_cfg:
        path = Path(env_cfg).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path

    if os.name == "nt":
        base = Path(os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or Path.home()) / APP_NAME
    else:
        base = Path.home() / ".tzbar"

    try:
        base.mkdir(parents=True, exist_ok=True)
        return base
    except Exception:
        fallback = Path.cwd() / "tzbar_config"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def get_settings_db_path() -> Path:
    return get_config_dir() / "tzbar.db"


def get_log_file() -> Path:
    return get_config_dir() / "tzbar.log"
