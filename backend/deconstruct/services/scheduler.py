"""Keyed debounce timers on the running event loop."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Hashable, Set

from ..logging_config import get_logger

logger = get_logger(__name__)

Action = Callable[[], Awaitable[None]]


class Debouncer:
    """Run at most one pending action per key, restarting the delay on reschedule."""

    def __init__(self) -> None:
        self._pending: Dict[Hashable, asyncio.Task] = {}
        # Fired actions stay referenced here until they finish
        self._running: Set[asyncio.Task] = set()

    def schedule_after(self, key: Hashable, delay: float, action: Action) -> asyncio.Task:
        """Cancel any pending action for ``key`` and schedule ``action`` after ``delay`` seconds."""
        self.cancel(key)
        task = asyncio.get_running_loop().create_task(self._run(key, delay, action))
        self._pending[key] = task
        return task

    async def _run(self, key: Hashable, delay: float, action: Action) -> None:
        await asyncio.sleep(delay)
        # Once fired the action is no longer cancellable through the debouncer
        task = asyncio.current_task()
        if self._pending.get(key) is task:
            del self._pending[key]
        if task is not None:
            self._running.add(task)
            task.add_done_callback(self._running.discard)
        await action()

    def running(self) -> int:
        return len(self._running)

    def cancel(self, key: Hashable) -> bool:
        task = self._pending.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    def pending(self, key: Hashable) -> bool:
        task = self._pending.get(key)
        return task is not None and not task.done()
