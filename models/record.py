"""Canonical todo record used by the merge, filter and pagination layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from core.settings import RECORDS
from datetime_utils import ensure_utc, parse_iso, to_iso_millis


class Origin(str, Enum):
    REMOTE = "remote"
    LOCAL_FALLBACK = "local-fallback"
    LOCAL_CREATED = "local-created"


@dataclass
class Record:
    id: int
    text: str
    completed: bool = False
    user_id: int = RECORDS.default_user_id
    created_at: Optional[datetime] = None
    origin: Origin = Origin.REMOTE
    saved_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        self.created_at = ensure_utc(self.created_at)
        if not isinstance(self.origin, Origin):
            self.origin = Origin(self.origin)

    # Persisted shape: {id, text, completed, userId, createdAt, origin, savedAt}
    def to_storage(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "userId": self.user_id,
            "createdAt": to_iso_millis(self.created_at),
            "origin": self.origin.value,
            "savedAt": to_iso_millis(self.saved_at),
        }
        if self.updated_at is not None:
            payload["updatedAt"] = to_iso_millis(self.updated_at)
        return payload

    @classmethod
    def from_storage(cls, data: Mapping[str, Any]) -> "Record":
        """Build a record from a stored entry; raises ``ValueError`` on bad rows."""

        if not isinstance(data, Mapping):
            raise ValueError("stored todo must be an object")
        record_id = data.get("id")
        if isinstance(record_id, bool) or not isinstance(record_id, int):
            raise ValueError(f"stored todo has invalid id: {record_id!r}")
        text = data.get("text") or data.get("todo") or data.get("title") or ""
        origin = data.get("origin") or Origin.LOCAL_FALLBACK.value
        if data.get("isLocal"):
            origin = Origin.LOCAL_CREATED.value
        return cls(
            id=record_id,
            text=str(text),
            completed=bool(data.get("completed", False)),
            user_id=_coerce_user_id(data.get("userId")),
            created_at=parse_iso(data.get("createdAt")) or parse_iso(data.get("savedAt")),
            origin=Origin(origin),
            saved_at=parse_iso(data.get("savedAt")),
            updated_at=parse_iso(data.get("updatedAt")),
        )


def _coerce_user_id(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return RECORDS.default_user_id
    try:
        return int(value)
    except (TypeError, ValueError):
        return RECORDS.default_user_id


__all__ = ["Origin", "Record"]
