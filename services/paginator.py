"""Page state over a filtered collection whose size changes over time."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.settings import PAGINATION
from services.events import EventBus, PageChanged


@dataclass(frozen=True)
class PageState:
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_previous: bool
    has_next: bool
    show_controls: bool


class Paginator:
    def __init__(
        self,
        page_size: int = PAGINATION.items_per_page,
        *,
        total_items: int = 0,
        max_visible_pages: int = PAGINATION.max_visible_pages,
        events: Optional[EventBus] = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.total_items = max(0, int(total_items))
        self.max_visible_pages = max(1, max_visible_pages)
        self.current_page = 1
        self.previous_page = 1
        self.events = events or EventBus()

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_items / self.page_size))

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def show_controls(self) -> bool:
        return self.total_pages > 1

    # Navigation
    def go_to(self, page: int) -> bool:
        """Move to ``page``; returns ``False`` (no-op) when out of range or unchanged."""

        if page < 1 or page > self.total_pages or page == self.current_page:
            return False
        self.previous_page = self.current_page
        self.current_page = page
        self._signal()
        return True

    def next_page(self) -> bool:
        return self.has_next and self.go_to(self.current_page + 1)

    def previous(self) -> bool:
        return self.has_previous and self.go_to(self.current_page - 1)

    def update_total(self, total_items: int, reset_to_first: bool = False) -> bool:
        """Resize the collection; returns ``True`` when a page-changed signal fired."""

        before_page = self.current_page
        before_pages = self.total_pages
        self.total_items = max(0, int(total_items))

        if reset_to_first:
            self.current_page = 1
        elif self.current_page > self.total_pages:
            self.current_page = self.total_pages

        if self.current_page != before_page or self.total_pages != before_pages:
            self.previous_page = before_page
            self._signal()
            return True
        return False

    # Views
    def bounds(self) -> Tuple[int, int]:
        """Slice indexes ``[start, end)`` of the current page."""

        start = (self.current_page - 1) * self.page_size
        return start, min(start + self.page_size, self.total_items)

    def page_numbers(self) -> List[Optional[int]]:
        """Visible page buttons around the current page; ``None`` marks an ellipsis."""

        total = self.total_pages
        if total <= 1:
            return []
        window = self.max_visible_pages
        start = max(1, self.current_page - window // 2)
        end = min(total, start + window - 1)
        if end - start + 1 < window:
            start = max(1, end - window + 1)

        numbers: List[Optional[int]] = []
        if start > 1:
            numbers.append(1)
            if start > 2:
                numbers.append(None)
        numbers.extend(range(start, end + 1))
        if end < total:
            if end < total - 1:
                numbers.append(None)
            numbers.append(total)
        return numbers

    def state(self) -> PageState:
        return PageState(
            current_page=self.current_page,
            page_size=self.page_size,
            total_items=self.total_items,
            total_pages=self.total_pages,
            has_previous=self.has_previous,
            has_next=self.has_next,
            show_controls=self.show_controls,
        )

    def _signal(self) -> None:
        self.events.publish(
            PageChanged(
                page=self.current_page,
                total_pages=self.total_pages,
                previous_page=self.previous_page,
            )
        )


__all__ = ["PageState", "Paginator"]
