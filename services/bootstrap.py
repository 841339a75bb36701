"""Wire the engine components together from the persisted configuration."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from services.controller import TodoController
from services.creation_dates import CreationDateAssigner
from services.events import EventBus
from services.paginator import Paginator
from services.todo_api import TodoApiClient
from services.todo_sync import RemoteLocalMerger
from storage.config import AppConfig, load_config
from storage.db import get_session, init_db
from storage.repository import RecordRepository
from storage.sql_repository import SqlRecordRepository


def default_repository() -> SqlRecordRepository:
    init_db()
    return SqlRecordRepository(get_session)


def build_controller(
    config: Optional[AppConfig] = None,
    *,
    config_path: Optional[Path] = None,
    repository: Optional[RecordRepository] = None,
    api: Optional[TodoApiClient] = None,
    events: Optional[EventBus] = None,
    logger: Optional[logging.Logger] = None,
) -> TodoController:
    cfg = config or load_config(config_path)
    repo = repository if repository is not None else default_repository()
    client = api or TodoApiClient(cfg.api_base_url, timeout=cfg.request_timeout_sec)
    merger = RemoteLocalMerger(
        client,
        repo,
        CreationDateAssigner(repo),
        default_user_id=cfg.default_user_id,
        logger=logger,
    )
    bus = events or EventBus()
    paginator = Paginator(cfg.items_per_page, events=bus)
    return TodoController(merger, events=bus, paginator=paginator)


__all__ = ["build_controller", "default_repository"]
