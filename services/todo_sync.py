from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from core.errors import TrackerError
from core.settings import LOG_PATH, PAGINATION, RECORDS
from datetime_utils import utc_now
from models.record import Origin, Record
from services.creation_dates import CreationDateAssigner
from services.todo_api import RemoteItem, TodoApiClient
from services.validators import validate_todo_text
from storage.repository import RecordRepository


def _ensure_logger() -> logging.Logger:
    logger = logging.getLogger("todo_tracker.sync")
    if not logger.handlers:
        LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


@dataclass
class MergeResult:
    records: List[Record]
    total: int
    page: int = 1
    page_size: int = PAGINATION.items_per_page
    degraded: bool = False
    error: Optional[TrackerError] = field(default=None, compare=False)


class LocalIdGenerator:
    """Millisecond timestamps, strictly increasing within the process."""

    def __init__(self, clock=time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


class RemoteLocalMerger:
    def __init__(
        self,
        api: TodoApiClient,
        repository: RecordRepository,
        dates: Optional[CreationDateAssigner] = None,
        *,
        default_user_id: int = RECORDS.default_user_id,
        id_generator: Optional[LocalIdGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api = api
        self.repository = repository
        self.dates = dates or CreationDateAssigner(repository)
        self.default_user_id = default_user_id
        self.next_local_id = id_generator or LocalIdGenerator()
        self.logger = logger or _ensure_logger()

    # Public API
    def fetch_page(self, page: int = 1, page_size: int = PAGINATION.items_per_page) -> MergeResult:
        page = max(1, int(page))
        page_size = max(1, int(page_size))
        local = self.repository.load_local()

        try:
            response = self.api.get_todos(limit=page_size, skip=(page - 1) * page_size)
        except TrackerError as exc:
            self.logger.warning(
                "Fetching todos failed (%s): %s; using %d local todos",
                exc.kind.value,
                exc.message,
                len(local),
            )
            return MergeResult(
                records=local,
                total=len(local),
                page=page,
                page_size=page_size,
                degraded=True,
                error=exc,
            )

        remote: List[Record] = []
        remote_ids = set()
        for item in response.items:
            if item.id in remote_ids:
                continue
            remote_ids.add(item.id)
            remote.append(self._normalize(item))
        known_ids = {record.id for record in local}
        for record in remote:
            if record.id not in known_ids:
                self.repository.save_local(record)

        survivors = [record for record in local if record.id not in remote_ids]
        dropped = len(local) - len(survivors)
        if dropped:
            self.logger.debug("Dropped %d local todos superseded by remote ones", dropped)

        self.logger.info(
            "Merged %d remote (%s) and %d local todos",
            len(remote),
            response.kind,
            len(survivors),
        )
        return MergeResult(
            records=survivors + remote,
            total=response.total + len(survivors),
            page=page,
            page_size=page_size,
        )

    def add_todo(
        self,
        text: str,
        completed: bool = False,
        user_id: Optional[int] = None,
    ) -> Record:
        """Create a todo remotely, falling back to a locally created one."""

        clean = validate_todo_text(text)
        owner = user_id if user_id is not None else self.default_user_id

        try:
            item = self.api.add_todo(clean, completed, owner)
        except TrackerError as exc:
            self.logger.warning(
                "Adding todo failed (%s): %s; keeping it locally", exc.kind.value, exc.message
            )
            created_at = utc_now()
            record = Record(
                id=self.next_local_id(),
                text=clean,
                completed=completed,
                user_id=owner,
                created_at=created_at.replace(microsecond=created_at.microsecond // 1000 * 1000),
                origin=Origin.LOCAL_CREATED,
            )
            self.dates.remember(record.id, record.created_at)
        else:
            record = self._normalize(item)
            if not record.text:
                record.text = clean
            self.logger.info("Todo %s created remotely", record.id)

        self.repository.save_local(record)
        return record

    # Helpers
    def _normalize(self, item: RemoteItem) -> Record:
        return Record(
            id=item.id,
            text=item.text,
            completed=item.completed,
            user_id=item.user_id if item.user_id is not None else self.default_user_id,
            created_at=self.dates.date_for(item.id),
            origin=Origin.REMOTE,
        )


__all__ = ["LocalIdGenerator", "MergeResult", "RemoteLocalMerger"]
