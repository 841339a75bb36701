"""Storage-agnostic contract for the local todo store."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Protocol, runtime_checkable

from datetime_utils import UTC
from models.record import Origin, Record


_EPOCH = datetime.min.replace(tzinfo=UTC)


@runtime_checkable
class RecordRepository(Protocol):
    def load_local(self) -> List[Record]:
        """Return stored todos, newest ``created_at`` first, ties in save order."""

    def save_local(self, record: Record) -> bool:
        """Insert or update ``record`` by id; ``False`` when the write failed."""

    def load_dates(self) -> Dict[int, datetime]:
        """Return the persisted id -> creation timestamp map."""

    def save_date(self, record_id: int, created_at: datetime) -> bool:
        """Persist the creation timestamp of ``record_id``."""


def loaded_origin(stored: str) -> Origin:
    """Provenance of a record read back from the store."""

    if stored == Origin.LOCAL_CREATED.value:
        return Origin.LOCAL_CREATED
    return Origin.LOCAL_FALLBACK


def newest_first(records: List[Record]) -> List[Record]:
    # ``records`` must already be in save order; sorted() is stable with reverse=True
    return sorted(
        records,
        key=lambda r: r.created_at or r.saved_at or _EPOCH,
        reverse=True,
    )


__all__ = ["RecordRepository", "loaded_origin", "newest_first"]
