"""Owns the todo list state and sequences load -> merge -> filter -> paginate."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from core.errors import TrackerError
from core.settings import FILTERS, PAGINATION
from models.record import Record
from services import filters
from services.debounce import Debouncer
from services.events import EventBus, LoadCompleted, PageChanged, QueryChanged, RecordCreated
from services.filters import FilterQuery, StatusFilter
from services.paginator import PageState, Paginator
from services.todo_sync import MergeResult, RemoteLocalMerger
from services.validators import DateInput, validate_date_range


logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No todos found. Add a new one to get started!"


@dataclass
class AppState:
    all_records: List[Record] = field(default_factory=list)
    filtered_records: List[Record] = field(default_factory=list)
    query: FilterQuery = field(default_factory=FilterQuery)
    total_items: int = 0
    is_loading: bool = False
    degraded: bool = False
    last_error: Optional[TrackerError] = None
    generation: int = 0


@dataclass(frozen=True)
class ListView:
    """Everything the display layer needs to render the list."""

    records: List[Record]
    page: PageState
    page_numbers: List[Optional[int]]
    total_records: int
    matched: int
    filter_status: Optional[str]
    empty_message: Optional[str]
    show_no_results: bool
    is_loading: bool
    degraded: bool
    error_message: Optional[str] = None


class TodoController:
    def __init__(
        self,
        merger: RemoteLocalMerger,
        *,
        page_size: int = PAGINATION.items_per_page,
        events: Optional[EventBus] = None,
        paginator: Optional[Paginator] = None,
        search_debounce_ms: int = FILTERS.search_debounce_ms,
    ) -> None:
        self.merger = merger
        self.events = events or EventBus()
        self.paginator = paginator or Paginator(page_size, events=self.events)
        self.paginator.events = self.events
        self.page_size = self.paginator.page_size
        self.state = AppState()
        self._visible: List[Record] = []
        # records created while the current load is in flight
        self._created_during_load: List[Record] = []
        self._search = Debouncer(self._debounced_search, search_debounce_ms)
        self.events.subscribe(PageChanged, self._on_page_changed)

    # Loading
    def begin_load(self) -> int:
        """Issue a load token; only the newest token's result is applied."""

        self.state.generation += 1
        self.state.is_loading = True
        self._created_during_load = []
        return self.state.generation

    def complete_load(
        self,
        token: int,
        result: MergeResult,
        query: Optional[FilterQuery] = None,
    ) -> bool:
        if token != self.state.generation:
            logger.info("Discarding stale load %s (latest is %s)", token, self.state.generation)
            return False

        loaded_ids = {r.id for r in result.records}
        missing = [r for r in self._created_during_load if r.id not in loaded_ids]
        self._created_during_load = []
        self.state.all_records = missing + list(result.records)
        self.state.total_items = result.total + len(missing)
        self.state.degraded = result.degraded
        self.state.last_error = result.error
        self.paginator.update_total(self.state.total_items, reset_to_first=False)

        query_changed = query is not None and query != self.state.query
        if query_changed:
            self.state.query = query
        self._refilter(reset_page=query_changed)
        self.state.is_loading = False

        if query_changed:
            self.events.publish(QueryChanged(query=self.state.query, matched=len(self.state.filtered_records)))
        self.events.publish(
            LoadCompleted(
                total=result.total,
                loaded=len(result.records),
                degraded=result.degraded,
                error=result.error.message if result.error else None,
            )
        )
        return True

    def load(self, page: int = 1, query: Optional[FilterQuery] = None) -> MergeResult:
        token = self.begin_load()
        result = self.merger.fetch_page(page, self.page_size)
        self.complete_load(token, result, query)
        return result

    async def load_async(self, page: int = 1, query: Optional[FilterQuery] = None) -> MergeResult:
        token = self.begin_load()
        result = await asyncio.to_thread(self.merger.fetch_page, page, self.page_size)
        self.complete_load(token, result, query)
        return result

    # Filters
    def apply_query(self, query: FilterQuery) -> bool:
        self._search.cancel()
        return self._apply_query(query)

    def _apply_query(self, query: FilterQuery) -> bool:
        if query == self.state.query:
            return False
        self.state.query = query
        self._refilter(reset_page=True)
        self.events.publish(QueryChanged(query=query, matched=len(self.state.filtered_records)))
        return True

    def set_filters(
        self,
        text: Optional[str] = None,
        from_date: DateInput = None,
        to_date: DateInput = None,
        status: "StatusFilter | str | None" = None,
    ) -> bool:
        return self.apply_query(FilterQuery.create(text, from_date, to_date, status))

    def set_search_text(self, text: Optional[str]) -> bool:
        return self.apply_query(replace(self.state.query, text=(text or "").strip()))

    def _debounced_search(self, text: Optional[str]) -> bool:
        return self._apply_query(replace(self.state.query, text=(text or "").strip()))

    def request_search(self, text: Optional[str]) -> asyncio.Task:
        """Debounced :meth:`set_search_text`; needs a running event loop."""

        return self._search.call(text)

    async def flush_search(self) -> None:
        await self._search.flush()

    def set_date_range(self, from_date: DateInput, to_date: DateInput) -> bool:
        start, end = validate_date_range(from_date, to_date)
        return self.apply_query(replace(self.state.query, from_date=start, to_date=end))

    def set_status(self, status: "StatusFilter | str | None") -> bool:
        return self.apply_query(replace(self.state.query, status=StatusFilter.parse(status)))

    def clear_filters(self) -> bool:
        return self.apply_query(FilterQuery())

    # Creation
    def create_todo(self, text: str, completed: bool = False, user_id: Optional[int] = None) -> Record:
        record = self.merger.add_todo(text, completed, user_id)
        self.add_record(record)
        return record

    def add_record(self, record: Record) -> bool:
        """Insert a freshly created record without reloading; returns its visibility."""

        self.state.all_records = [r for r in self.state.all_records if r.id != record.id]
        self.state.all_records.insert(0, record)
        if self.state.is_loading:
            self._created_during_load = [r for r in self._created_during_load if r.id != record.id]
            self._created_during_load.insert(0, record)

        had_match = any(r.id == record.id for r in self.state.filtered_records)
        if had_match:
            self.state.filtered_records = [r for r in self.state.filtered_records if r.id != record.id]
        if filters.matches(record, self.state.query):
            self.state.filtered_records.insert(0, record)
            self.paginator.update_total(len(self.state.filtered_records), reset_to_first=False)
        elif had_match:
            self.paginator.update_total(len(self.state.filtered_records), reset_to_first=False)
        self._refresh_visible()

        visible = any(r.id == record.id for r in self._visible)
        self.events.publish(RecordCreated(record=record, visible=visible))
        return visible

    # Navigation
    def go_to_page(self, page: int) -> bool:
        return self.paginator.go_to(page)

    def next_page(self) -> bool:
        return self.paginator.next_page()

    def previous_page(self) -> bool:
        return self.paginator.previous()

    # Views
    def visible_records(self) -> List[Record]:
        return list(self._visible)

    def filter_status(self) -> Optional[str]:
        query = self.state.query
        if not query.is_active:
            return None
        message = f"Showing {len(self.state.filtered_records)} of {len(self.state.all_records)} todos"
        parts = query.describe()
        if parts:
            message += f" ({', '.join(parts)})"
        return message

    def empty_message(self) -> Optional[str]:
        if self._visible:
            return None
        query = self.state.query
        if not query.is_active:
            return EMPTY_MESSAGE
        if query.status is StatusFilter.ACTIVE:
            return "No active todos found."
        if query.status is StatusFilter.COMPLETED:
            return "No completed todos found."
        if query.has_text:
            return f'No todos found matching "{query.text}".'
        return "No todos match your current filters."

    def view(self) -> ListView:
        query = self.state.query
        return ListView(
            records=self.visible_records(),
            page=self.paginator.state(),
            page_numbers=self.paginator.page_numbers(),
            total_records=len(self.state.all_records),
            matched=len(self.state.filtered_records),
            filter_status=self.filter_status(),
            empty_message=self.empty_message(),
            show_no_results=(query.has_text or query.has_date_range) and not self.state.filtered_records,
            is_loading=self.state.is_loading,
            degraded=self.state.degraded,
            error_message=self.state.last_error.message if self.state.last_error else None,
        )

    # Internals
    def _refilter(self, reset_page: bool) -> None:
        self.state.filtered_records = filters.apply(self.state.all_records, self.state.query)
        self.paginator.update_total(len(self.state.filtered_records), reset_to_first=reset_page)
        self._refresh_visible()

    def _refresh_visible(self) -> None:
        start, end = self.paginator.bounds()
        self._visible = self.state.filtered_records[start:end]

    def _on_page_changed(self, event: PageChanged) -> None:
        logger.debug("Page changed %s -> %s of %s", event.previous_page, event.page, event.total_pages)
        self._refresh_visible()


__all__ = ["AppState", "EMPTY_MESSAGE", "ListView", "TodoController"]
