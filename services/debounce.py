from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from core.settings import FILTERS


logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``callback`` once per quiet period of ``delay_ms``.

    Each :meth:`call` cancels the pending invocation and schedules a new
    one on the running event loop with the latest arguments.
    """

    def __init__(self, callback: Callable[..., Any], delay_ms: int = FILTERS.search_debounce_ms) -> None:
        self.callback = callback
        self.delay = max(0, delay_ms) / 1000
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire(args, kwargs))
        return self._task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Wait for the pending invocation, if any."""

        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _fire(self, args, kwargs) -> None:
        await asyncio.sleep(self.delay)
        try:
            self.callback(*args, **kwargs)
        except Exception:
            logger.exception("Debounced callback failed")
            raise


__all__ = ["Debouncer"]
