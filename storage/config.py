"""Simple JSON-backed configuration store."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from core.settings import API, CONFIG_PATH, PAGINATION, RECORDS


@dataclass
class AppConfig:
    """User overrides persisted to ``config.json``."""

    api_base_url: str = API.base_url
    request_timeout_sec: float = API.timeout_sec
    items_per_page: int = PAGINATION.items_per_page
    default_user_id: int = RECORDS.default_user_id


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _load_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce(name: str, value: Any, default: Any) -> Any:
    if value is None:
        return default
    try:
        if name == "api_base_url":
            text = str(value).strip().rstrip("/")
            return text or default
        if name == "request_timeout_sec":
            number = float(value)
            return number if number > 0 else default
        number = int(value)
        if name == "items_per_page" and number < 1:
            return default
        return number
    except (TypeError, ValueError):
        return default


def load_config(path: Optional[Path] = None) -> AppConfig:
    target = path or CONFIG_PATH
    data = _load_raw(target)
    defaults = AppConfig()
    values = {
        f.name: _coerce(f.name, data.get(f.name), getattr(defaults, f.name))
        for f in fields(AppConfig)
    }
    return AppConfig(**values)


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    target = path or CONFIG_PATH
    _ensure_parent(target)
    payload = json.dumps(asdict(config), ensure_ascii=False, indent=2, sort_keys=True)
    tmp = target.with_suffix(".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(target)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass


def update_config(path: Optional[Path] = None, **changes: Any) -> AppConfig:
    target = path or CONFIG_PATH
    cfg = load_config(target)
    for key, value in changes.items():
        if hasattr(cfg, key):
            setattr(cfg, key, _coerce(key, value, getattr(cfg, key)))
    save_config(cfg, target)
    return cfg


__all__ = ["AppConfig", "load_config", "save_config", "update_config"]
