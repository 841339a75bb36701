"""Typed publish/subscribe channel between the engine and the display layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type, TypeVar

from models.record import Record
from services.filters import FilterQuery


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryChanged:
    query: FilterQuery
    matched: int


@dataclass(frozen=True)
class PageChanged:
    page: int
    total_pages: int
    previous_page: int


@dataclass(frozen=True)
class LoadCompleted:
    total: int
    loaded: int
    degraded: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class RecordCreated:
    record: Record
    visible: bool


E = TypeVar("E")
Listener = Callable[[E], None]


class EventBus:
    def __init__(self) -> None:
        self._listeners: Dict[type, List[Callable]] = {}

    def subscribe(self, event_type: Type[E], callback: Listener) -> None:
        listeners = self._listeners.setdefault(event_type, [])
        if callback not in listeners:
            listeners.append(callback)

    def unsubscribe(self, event_type: type, callback: Callable) -> None:
        listeners = self._listeners.get(event_type)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def publish(self, event: object) -> None:
        for listener in list(self._listeners.get(type(event), [])):
            try:
                listener(event)
            except Exception:
                # listener failures never interrupt publishing
                logger.exception("Listener %r failed for %s", listener, type(event).__name__)


__all__ = [
    "EventBus",
    "LoadCompleted",
    "PageChanged",
    "QueryChanged",
    "RecordCreated",
]
