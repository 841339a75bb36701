"""Compound todo filtering: text search AND creation-date range AND status.

The engine assumes a validated :class:`FilterQuery`; build queries via
:meth:`FilterQuery.create` (which raises ``ValidationError``) when the
values come from user input.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from core.errors import ValidationError
from datetime_utils import day_of
from models.record import Record
from services.validators import DateInput, validate_date_range


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: "StatusFilter | str | None") -> "StatusFilter":
        if value is None or value == "":
            return cls.ALL
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown status: {value!r}", field="status") from None


@dataclass(frozen=True)
class FilterQuery:
    text: str = ""
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    status: StatusFilter = StatusFilter.ALL

    @classmethod
    def create(
        cls,
        text: Optional[str] = None,
        from_date: DateInput = None,
        to_date: DateInput = None,
        status: "StatusFilter | str | None" = None,
    ) -> "FilterQuery":
        start, end = validate_date_range(from_date, to_date)
        return cls(
            text=(text or "").strip(),
            from_date=start,
            to_date=end,
            status=StatusFilter.parse(status),
        )

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_date_range(self) -> bool:
        return self.from_date is not None or self.to_date is not None

    @property
    def is_active(self) -> bool:
        return self.has_text or self.has_date_range or self.status is not StatusFilter.ALL

    def __and__(self, other: "FilterQuery") -> "FilterQuery":
        """Conjunction of two queries that constrain different fields."""

        merged = self
        for name, unset in (("text", ""), ("from_date", None), ("to_date", None), ("status", StatusFilter.ALL)):
            theirs = getattr(other, name)
            if theirs == unset:
                continue
            ours = getattr(merged, name)
            if ours != unset and ours != theirs:
                raise ValueError(f"Both queries constrain {name!r}")
            merged = replace(merged, **{name: theirs})
        return merged

    def describe(self) -> List[str]:
        parts: List[str] = []
        if self.has_text:
            parts.append(f'search: "{self.text}"')
        if self.from_date and self.to_date:
            parts.append(f"date range: {self.from_date.isoformat()} to {self.to_date.isoformat()}")
        elif self.from_date:
            parts.append(f"from date: {self.from_date.isoformat()}")
        elif self.to_date:
            parts.append(f"to date: {self.to_date.isoformat()}")
        if self.status is not StatusFilter.ALL:
            parts.append(f"status: {self.status.value}")
        return parts


def _matches_text(record: Record, needle: str) -> bool:
    if not needle:
        return True
    return needle.lower() in (record.text or "").lower()


def _matches_dates(record: Record, query: FilterQuery) -> bool:
    if not query.has_date_range:
        return True
    created = day_of(record.created_at)
    if created is None:
        return False
    if query.from_date is not None and created < query.from_date:
        return False
    if query.to_date is not None and created > query.to_date:
        return False
    return True


def _matches_status(record: Record, status: StatusFilter) -> bool:
    if status is StatusFilter.ACTIVE:
        return not record.completed
    if status is StatusFilter.COMPLETED:
        return bool(record.completed)
    return True


def matches(record: Record, query: FilterQuery) -> bool:
    return (
        _matches_text(record, query.text)
        and _matches_dates(record, query)
        and _matches_status(record, query.status)
    )


def apply(records: Iterable[Record], query: FilterQuery) -> List[Record]:
    """Ordered subsequence of ``records`` satisfying every predicate of ``query``."""

    if not query.is_active:
        return list(records)
    return [record for record in records if matches(record, query)]


__all__ = ["FilterQuery", "StatusFilter", "apply", "matches"]
