from __future__ import annotations

from pathlib import Path
from typing import Optional

from sqlmodel import SQLModel, create_engine, Session

from core.settings import DB_PATH, ensure_data_dirs

# Ensure SQLModel metadata is populated
import models.local_record  # noqa: F401


_engine = None


def create_store_engine(path: Optional[Path] = None):
    target = Path(path or DB_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{target.as_posix()}", echo=False)


def init_db(engine=None):
    global _engine
    if engine is None:
        ensure_data_dirs()
        engine = get_engine()
    _engine = engine
    SQLModel.metadata.create_all(engine)
    return engine


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_store_engine()
    return _engine


def get_session() -> Session:
    return Session(get_engine())


__all__ = ["create_store_engine", "get_engine", "get_session", "init_db"]
