"""Input validation for todo text and date-range filters."""
from __future__ import annotations

from datetime import date
from typing import Optional, Tuple, Union

from core.errors import ValidationError
from core.settings import RECORDS
from datetime_utils import parse_date_input


DateInput = Union[str, date, None]


def validate_todo_text(
    value: Optional[str],
    *,
    min_length: int = RECORDS.text_min_length,
    max_length: int = RECORDS.text_max_length,
) -> str:
    """Return the trimmed text or raise :class:`ValidationError`."""

    trimmed = value.strip() if isinstance(value, str) else ""
    if not trimmed:
        raise ValidationError("This field is required", field="todo")
    if len(trimmed) < min_length:
        raise ValidationError(f"Must be at least {min_length} characters", field="todo")
    if len(trimmed) > max_length:
        raise ValidationError(f"Must be no more than {max_length} characters", field="todo")
    return trimmed


def validate_date(value: DateInput, *, field: str = "date") -> Optional[date]:
    # empty input means "no bound"
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = parse_date_input(value)
    if parsed is None:
        raise ValidationError("Please enter a valid date", field=field)
    return parsed


def validate_date_range(from_value: DateInput, to_value: DateInput) -> Tuple[Optional[date], Optional[date]]:
    from_date = validate_date(from_value, field="startDate")
    to_date = validate_date(to_value, field="endDate")
    if from_date and to_date and from_date > to_date:
        raise ValidationError("Start date must be before end date", field="dateRange")
    return from_date, to_date


__all__ = ["validate_date", "validate_date_range", "validate_todo_text"]
