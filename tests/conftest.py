import logging
from datetime import datetime, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401
from core.errors import ErrorKind, TransportError
from models import Origin, Record
from services.creation_dates import CreationDateAssigner
from services.todo_api import ListResponse, PagedResponse, RemoteItem, parse_item
from services.todo_sync import RemoteLocalMerger
from storage.sql_repository import SqlRecordRepository


NOW = datetime(2024, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock():
    return NOW


class FakeApi:
    """In-memory stand-in for :class:`TodoApiClient`."""

    def __init__(self, response=None, error=None, add_error=None):
        self.response = response if response is not None else PagedResponse(items=[], total=0)
        self.error = error
        self.add_error = add_error
        self.calls = []
        self.added = []
        self.next_id = 255

    def get_todos(self, limit, skip):
        self.calls.append((limit, skip))
        if self.error is not None:
            raise self.error
        return self.response

    def add_todo(self, text, completed, user_id):
        self.added.append((text, completed, user_id))
        if self.add_error is not None:
            raise self.add_error
        return parse_item({"id": self.next_id, "todo": text, "completed": completed, "userId": user_id})


def remote_items(*ids, completed_ids=()):
    return [RemoteItem(id=i, text=f"Remote task {i}", completed=i in completed_ids, user_id=7) for i in ids]


def paged(*ids, total=None, completed_ids=()):
    items = remote_items(*ids, completed_ids=completed_ids)
    return PagedResponse(items=items, total=len(items) if total is None else total)


def listed(*ids):
    return ListResponse(items=remote_items(*ids))


def offline():
    return TransportError(ErrorKind.TRANSPORT_OFFLINE, "You appear to be offline")


def make_record(record_id, text=None, *, completed=False, created_at=None, origin=Origin.LOCAL_FALLBACK):
    return Record(
        id=record_id,
        text=text or f"Local task {record_id}",
        completed=completed,
        created_at=created_at or NOW,
        origin=origin,
    )


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


@pytest.fixture()
def repository(session_factory):
    return SqlRecordRepository(session_factory)


@pytest.fixture()
def quiet_logger():
    logger = logging.getLogger("tests.todo_tracker")
    logger.addHandler(logging.NullHandler())
    return logger


@pytest.fixture()
def make_merger(repository, quiet_logger):
    def factory(api, repo=None):
        repo = repo or repository
        return RemoteLocalMerger(
            api,
            repo,
            CreationDateAssigner(repo, clock=fixed_clock),
            logger=quiet_logger,
        )

    return factory
