"""JSON-file implementation of :class:`RecordRepository`.

Two documents are kept side by side:

* the creation-date map ``{"<id>": "<ISO timestamp>", ...}``
* the local todo list, an ordered array of
  ``{id, text, completed, userId, createdAt, origin, savedAt}``

Unreadable documents are treated as empty; the next successful write
replaces them.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.settings import CREATION_DATES_PATH, LOCAL_TODOS_PATH
from datetime_utils import parse_iso, to_iso_millis, utc_now
from models.record import Record
from storage.repository import loaded_origin, newest_first


logger = logging.getLogger(__name__)


class JsonRecordRepository:
    def __init__(
        self,
        records_path: Path | str | None = None,
        dates_path: Path | str | None = None,
    ) -> None:
        self.records_path = Path(records_path or LOCAL_TODOS_PATH)
        self.dates_path = Path(dates_path or CREATION_DATES_PATH)

    # generic helpers
    def _read(self, path: Path) -> Optional[Any]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error("Failed to read %s: %s", path.name, exc)
            return None

    def _write(self, path: Path, data: Any) -> bool:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        tmp = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path.name, exc)
            return False
        finally:
            if tmp.exists():
                try:
                    tmp.unlink()
                except OSError:
                    pass
        return True

    def _raw_records(self) -> List[Dict[str, Any]]:
        data = self._read(self.records_path)
        if not isinstance(data, list):
            if data is not None:
                logger.warning("Local todo list has unexpected shape; ignoring it")
            return []
        return [entry for entry in data if isinstance(entry, dict)]

    # todos
    def load_local(self) -> List[Record]:
        records: List[Record] = []
        for entry in self._raw_records():
            try:
                record = Record.from_storage(entry)
            except ValueError as exc:
                logger.warning("Skipping unreadable local todo: %s", exc)
                continue
            record.origin = loaded_origin(record.origin.value)
            records.append(record)
        return newest_first(records)

    def save_local(self, record: Record) -> bool:
        if record.id is None:
            logger.warning("Cannot save todo without id: %r", record)
            return False

        entries = self._raw_records()
        payload = record.to_storage()
        for index, existing in enumerate(entries):
            if existing.get("id") == record.id:
                merged = dict(existing)
                merged.update({k: v for k, v in payload.items() if k != "savedAt"})
                merged["updatedAt"] = to_iso_millis(utc_now())
                entries[index] = merged
                logger.debug("Updated existing todo in local store: %s", record.id)
                break
        else:
            payload["savedAt"] = to_iso_millis(record.saved_at or utc_now())
            payload.pop("updatedAt", None)
            entries.append(payload)
            logger.debug("Added new todo to local store: %s", record.id)
        return self._write(self.records_path, entries)

    # creation dates
    def _raw_dates(self) -> Dict[str, Any]:
        data = self._read(self.dates_path)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Creation date map has unexpected shape; ignoring it")
            return {}
        return data

    def load_dates(self) -> Dict[int, datetime]:
        dates: Dict[int, datetime] = {}
        for key, value in self._raw_dates().items():
            try:
                record_id = int(key)
            except (TypeError, ValueError):
                continue
            parsed = parse_iso(value)
            if parsed is not None:
                dates[record_id] = parsed
        return dates

    def save_date(self, record_id: int, created_at: datetime) -> bool:
        data = self._raw_dates()
        data[str(record_id)] = to_iso_millis(created_at)
        return self._write(self.dates_path, data)


__all__ = ["JsonRecordRepository"]
