from datetime import timedelta

from conftest import NOW, fixed_clock
from services.creation_dates import CreationDateAssigner, simulated_date
from storage.json_repository import JsonRecordRepository


def test_simulated_date_is_window_start_plus_id_mod_window():
    assert simulated_date(0, NOW) == NOW - timedelta(days=30)
    assert simulated_date(7, NOW) == NOW - timedelta(days=23)
    assert simulated_date(37, NOW) == simulated_date(7, NOW)


def test_lower_ids_trend_older():
    assert simulated_date(3, NOW) < simulated_date(4, NOW) < simulated_date(29, NOW)


def test_date_for_is_idempotent(repository):
    assigner = CreationDateAssigner(repository, clock=fixed_clock)
    first = assigner.date_for(12)
    assert assigner.date_for(12) == first


def test_date_for_does_not_depend_on_resolution_order(tmp_path):
    forward = CreationDateAssigner(
        JsonRecordRepository(tmp_path / "a" / "todos.json", tmp_path / "a" / "dates.json"),
        clock=fixed_clock,
    )
    backward = CreationDateAssigner(
        JsonRecordRepository(tmp_path / "b" / "todos.json", tmp_path / "b" / "dates.json"),
        clock=fixed_clock,
    )

    a_then_b = (forward.date_for(1), forward.date_for(2))
    b_then_a = (backward.date_for(2), backward.date_for(1))

    assert a_then_b == (b_then_a[1], b_then_a[0])


def test_persisted_date_wins_over_new_clock(repository):
    CreationDateAssigner(repository, clock=fixed_clock).date_for(5)

    later = CreationDateAssigner(repository, clock=lambda: NOW + timedelta(days=10))
    assert later.date_for(5) == simulated_date(5, NOW)
    assert repository.load_dates()[5] == simulated_date(5, NOW)


def test_remember_keeps_first_timestamp(repository):
    assigner = CreationDateAssigner(repository, clock=fixed_clock)
    assigner.remember(99, NOW)
    assigner.remember(99, NOW + timedelta(days=1))
    assert assigner.date_for(99) == NOW
