from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _normalize_fraction(s: str) -> str:
    """Pad or trim fractional seconds to 6 digits."""

    digits = s[:6]
    if len(digits) < 6:
        digits = digits + "0" * (6 - len(digits))
    return digits


def parse_iso(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 / RFC3339 string and return a timezone-aware UTC datetime."""

    if not s or not isinstance(s, str):
        return None

    value = s.strip()
    if not value:
        return None

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    if "." in value:
        head, tail = value.split(".", 1)
        tz_sign = "+"
        tz_suffix = "00:00"
        if "+" in tail:
            frac, tz_suffix = tail.split("+", 1)
            tz_sign = "+"
        elif "-" in tail:
            frac, tz_suffix = tail.split("-", 1)
            tz_sign = "-"
        else:
            frac = tail
        frac = _normalize_fraction(frac)
        value = f"{head}.{frac}{tz_sign}{tz_suffix}"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_iso_millis(dt: Optional[Union[datetime, str]]) -> Optional[str]:
    """Serialize to ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    if dt is None:
        return None
    if isinstance(dt, str):
        dt = parse_iso(dt)
    value = ensure_utc(dt)
    if value is None:
        return None
    millis = value.microsecond // 1000
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def parse_date_input(value: Optional[Union[str, date]]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` (or full ISO timestamp) filter input into a date."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    parsed = parse_iso(text)
    return parsed.date() if parsed else None


def day_of(dt: Optional[datetime]) -> Optional[date]:
    value = ensure_utc(dt)
    return value.date() if value else None


__all__ = [
    "UTC",
    "day_of",
    "ensure_utc",
    "parse_date_input",
    "parse_iso",
    "to_iso_millis",
    "utc_now",
]
