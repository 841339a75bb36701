from datetime import date, datetime, timezone

import pytest

from conftest import make_record
from core.errors import ValidationError
from services.filters import FilterQuery, StatusFilter, apply, matches


def at(day, hour=12, minute=0, second=0, micro=0):
    return datetime(2024, 1, day, hour, minute, second, micro, tzinfo=timezone.utc)


@pytest.fixture()
def records():
    return [
        make_record(1, "Buy groceries", completed=False, created_at=at(3)),
        make_record(2, "Read a BOOK", completed=True, created_at=at(5, 0, 0)),
        make_record(3, "Write the report", completed=False, created_at=at(7)),
        make_record(4, "Book flights", completed=True, created_at=at(10, 23, 59, 59, 999000)),
        make_record(5, "Call mom", completed=False, created_at=at(12)),
    ]


def ids(records):
    return [r.id for r in records]


def test_completed_status_keeps_relative_order(records):
    result = apply(records, FilterQuery(status=StatusFilter.COMPLETED))
    assert ids(result) == [2, 4]


def test_active_status(records):
    assert ids(apply(records, FilterQuery.create(status="active"))) == [1, 3, 5]


def test_empty_query_returns_everything(records):
    query = FilterQuery.create(text="   ", status="")
    assert not query.is_active
    assert ids(apply(records, query)) == [1, 2, 3, 4, 5]


def test_text_search_is_case_insensitive(records):
    assert ids(apply(records, FilterQuery.create(text="book"))) == [2, 4]


def test_date_bounds_are_inclusive_by_day(records):
    query = FilterQuery.create(from_date="2024-01-05", to_date="2024-01-10")
    assert ids(apply(records, query)) == [2, 3, 4]


def test_only_from_date(records):
    assert ids(apply(records, FilterQuery.create(from_date=date(2024, 1, 7)))) == [3, 4, 5]


def test_only_to_date_covers_end_of_day(records):
    assert ids(apply(records, FilterQuery.create(to_date="2024-01-10"))) == [1, 2, 3, 4]


def test_records_without_date_fail_date_filters():
    undated = make_record(9)
    undated.created_at = None
    assert matches(undated, FilterQuery())
    assert not matches(undated, FilterQuery.create(from_date="2024-01-01"))


def test_inverted_range_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        FilterQuery.create(from_date="2024-01-10", to_date="2024-01-05")
    assert excinfo.value.field == "dateRange"
    assert excinfo.value.message == "Start date must be before end date"


def test_invalid_date_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        FilterQuery.create(from_date="yesterday")
    assert excinfo.value.field == "startDate"


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        FilterQuery.create(status="archived")
    assert excinfo.value.field == "status"


@pytest.mark.parametrize(
    "first, second",
    [
        (FilterQuery.create(text="book"), FilterQuery.create(status="completed")),
        (FilterQuery.create(status="active"), FilterQuery.create(from_date="2024-01-04")),
        (FilterQuery.create(to_date="2024-01-10"), FilterQuery.create(text="o")),
    ],
)
def test_sequential_filtering_equals_conjunction(records, first, second):
    combined = first & second
    assert ids(apply(apply(records, first), second)) == ids(apply(records, combined))
    assert ids(apply(apply(records, second), first)) == ids(apply(records, combined))


def test_conjunction_rejects_conflicting_fields():
    with pytest.raises(ValueError):
        FilterQuery.create(text="a") & FilterQuery.create(text="b")


def test_describe_active_filters():
    query = FilterQuery.create(text="milk", from_date="2024-01-01", to_date="2024-01-31", status="completed")
    assert query.describe() == [
        'search: "milk"',
        "date range: 2024-01-01 to 2024-01-31",
        "status: completed",
    ]
    assert FilterQuery.create(to_date="2024-02-01").describe() == ["to date: 2024-02-01"]
    assert FilterQuery().describe() == []


def test_apply_is_deterministic(records):
    query = FilterQuery.create(text="o", status="all")
    assert ids(apply(records, query)) == ids(apply(records, query))
