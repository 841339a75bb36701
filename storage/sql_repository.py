"""SQLite-backed implementation of :class:`RecordRepository`."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from datetime_utils import ensure_utc, parse_iso, to_iso_millis, utc_now
from models.local_record import CreationDateRow, LocalRecordRow
from models.record import Record
from storage.db import get_session
from storage.repository import loaded_origin, newest_first


logger = logging.getLogger(__name__)


def _row_to_record(row: LocalRecordRow) -> Record:
    return Record(
        id=row.record_id,
        text=row.text,
        completed=bool(row.completed),
        user_id=row.user_id,
        created_at=parse_iso(row.created_at) or ensure_utc(row.saved_at),
        origin=loaded_origin(row.origin),
        saved_at=ensure_utc(row.saved_at),
        updated_at=ensure_utc(row.updated_at),
    )


class SqlRecordRepository:
    """Local todos and creation dates stored in ``todos.db``."""

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory

    # todos
    def load_local(self) -> List[Record]:
        try:
            with self._session_factory() as session:
                rows = list(session.exec(select(LocalRecordRow).order_by(LocalRecordRow.seq)))
        except SQLAlchemyError as exc:
            logger.error("Failed to read local todos: %s", exc)
            return []

        records: List[Record] = []
        for row in rows:
            try:
                records.append(_row_to_record(row))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable local todo %s: %s", row.record_id, exc)
        return newest_first(records)

    def save_local(self, record: Record) -> bool:
        if record.id is None:
            logger.warning("Cannot save todo without id: %r", record)
            return False
        try:
            with self._session_factory() as session:
                stmt = select(LocalRecordRow).where(LocalRecordRow.record_id == record.id)
                row = session.exec(stmt).first()
                if row is None:
                    row = LocalRecordRow(
                        record_id=record.id,
                        text=record.text,
                        completed=record.completed,
                        user_id=record.user_id,
                        created_at=to_iso_millis(record.created_at),
                        origin=record.origin.value,
                        saved_at=record.saved_at or utc_now(),
                    )
                    logger.debug("Added new todo to local store: %s", record.id)
                else:
                    row.text = record.text
                    row.completed = record.completed
                    row.user_id = record.user_id
                    row.created_at = to_iso_millis(record.created_at) or row.created_at
                    row.origin = record.origin.value
                    row.updated_at = utc_now()
                    logger.debug("Updated existing todo in local store: %s", record.id)
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to save local todo %s: %s", record.id, exc)
            return False
        return True

    # creation dates
    def load_dates(self) -> Dict[int, datetime]:
        try:
            with self._session_factory() as session:
                rows = list(session.exec(select(CreationDateRow)))
        except SQLAlchemyError as exc:
            logger.error("Failed to read creation dates: %s", exc)
            return {}

        dates: Dict[int, datetime] = {}
        for row in rows:
            value = parse_iso(row.created_at)
            if value is None:
                logger.warning("Ignoring unparseable creation date for %s", row.record_id)
                continue
            dates[row.record_id] = value
        return dates

    def save_date(self, record_id: int, created_at: datetime) -> bool:
        try:
            with self._session_factory() as session:
                row = session.get(CreationDateRow, record_id)
                stamp = to_iso_millis(created_at)
                if row is None:
                    row = CreationDateRow(record_id=record_id, created_at=stamp)
                else:
                    row.created_at = stamp
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to save creation date for %s: %s", record_id, exc)
            return False
        return True


__all__ = ["SqlRecordRepository"]
