"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


HOME_ENV_VAR = "TODO_TRACKER_HOME"


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(os.environ if env is None else env)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    override = environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "TodoTracker"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"

DB_PATH = DATA_DIR / "todos.db"
CONFIG_PATH = DATA_DIR / "config.json"
LOCAL_TODOS_PATH = DATA_DIR / "local_todos.json"
CREATION_DATES_PATH = DATA_DIR / "creation_dates.json"
LOG_PATH = LOG_DIR / "sync.log"


def ensure_data_dirs() -> None:
    for _dir in (DATA_DIR, LOG_DIR):
        _dir.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = "https://dummyjson.com"
    todos_endpoint: str = "/todos"
    add_endpoint: str = "/todos/add"
    timeout_sec: float = 10.0


@dataclass(frozen=True)
class PaginationSettings:
    items_per_page: int = 10
    max_visible_pages: int = 5


@dataclass(frozen=True)
class FilterSettings:
    search_debounce_ms: int = 300


@dataclass(frozen=True)
class RecordSettings:
    default_user_id: int = 1
    text_min_length: int = 3
    text_max_length: int = 100
    # simulated creation dates spread over this many days
    simulated_window_days: int = 30


API = ApiSettings()
PAGINATION = PaginationSettings()
FILTERS = FilterSettings()
RECORDS = RecordSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "LOCAL_TODOS_PATH",
    "CREATION_DATES_PATH",
    "LOG_PATH",
    "API",
    "PAGINATION",
    "FILTERS",
    "RECORDS",
    "ApiSettings",
    "PaginationSettings",
    "FilterSettings",
    "RecordSettings",
    "ensure_data_dirs",
    "get_default_data_dir",
]
