"""Platform-specific paths.

Keeps user-created data (custom techniques, logs) out of install folders.
Relies on standard environment variables rather than extra dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "Breathpacer"
TECHNIQUES_FILENAME = "techniques.json"


def is_windows() -> bool:
    return os.name == "nt"


def get_user_data_dir(app_name: str = APP_NAME) -> Path:
    """Return a persistent per-user data directory.

    Windows: %APPDATA%\\Breathpacer
    Elsewhere: $XDG_DATA_HOME/breathpacer, else ~/.breathpacer
    """
    if is_windows():
        base = os.getenv("APPDATA")
        if base:
            return Path(base) / app_name
        return Path.home() / "AppData" / "Roaming" / app_name

    xdg = os.getenv("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / app_name.lower()
    return Path.home() / f".{app_name.lower()}"


def get_techniques_path(app_name: str = APP_NAME) -> Path:
    """Default location of the custom techniques file."""
    return get_user_data_dir(app_name) / TECHNIQUES_FILENAME


def ensure_dir(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
