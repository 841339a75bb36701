"""Deterministic simulated creation dates for todos without a real timestamp."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from core.settings import RECORDS
from datetime_utils import utc_now
from storage.repository import RecordRepository


logger = logging.getLogger(__name__)


def simulated_date(record_id: int, now: datetime, window_days: int = RECORDS.simulated_window_days) -> datetime:
    """``now - window`` advanced by ``id mod window`` days, so lower ids trend older."""

    base = now - timedelta(days=window_days)
    created = base + timedelta(days=record_id % window_days)
    # stored at millisecond precision; truncate so reloads compare equal
    return created.replace(microsecond=created.microsecond // 1000 * 1000)


class CreationDateAssigner:
    def __init__(
        self,
        repository: RecordRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
        window_days: int = RECORDS.simulated_window_days,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.window_days = window_days
        self._cache: Optional[Dict[int, datetime]] = None

    def _dates(self) -> Dict[int, datetime]:
        if self._cache is None:
            self._cache = dict(self.repository.load_dates())
        return self._cache

    def date_for(self, record_id: int) -> datetime:
        dates = self._dates()
        existing = dates.get(record_id)
        if existing is not None:
            return existing

        created = simulated_date(record_id, self.clock(), self.window_days)
        dates[record_id] = created
        if not self.repository.save_date(record_id, created):
            logger.warning("Creation date for %s is cached in memory only", record_id)
        return created

    def remember(self, record_id: int, created_at: datetime) -> None:
        """Record a real creation timestamp so later lookups keep it."""

        dates = self._dates()
        if record_id in dates:
            return
        dates[record_id] = created_at
        self.repository.save_date(record_id, created_at)


__all__ = ["CreationDateAssigner", "simulated_date"]
