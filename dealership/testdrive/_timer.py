"""
Timers — cancellable scheduled callbacks.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

logger = logging.getLogger("dealership.testdrive")

type TimerCallback = Callable[[], Awaitable[None]]


class TimerHandle(Protocol):
    def cancel(self) -> bool:
        """Cancel if not yet fired. Returns True if the callback will not run."""
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: TimerCallback) -> TimerHandle:
        """Run callback after delay seconds."""
        ...


class _TaskTimer:
    """
    Timer as an asyncio task.

    Note: once the delay elapses the callback is committed to run;
    cancel() after that point returns False and leaves it alone.
    """

    def __init__(self, delay: float, callback: TimerCallback) -> None:
        self._fired = False
        self.task = asyncio.get_running_loop().create_task(self._run(delay, callback))

    async def _run(self, delay: float, callback: TimerCallback) -> None:
        await asyncio.sleep(max(delay, 0.0))
        self._fired = True
        await callback()

    def cancel(self) -> bool:
        if self._fired or self.task.done():
            return False
        return self.task.cancel()


class AsyncioScheduler:
    """Scheduler on the running event loop. Keeps its tasks referenced until done."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def call_later(self, delay: float, callback: TimerCallback) -> TimerHandle:
        timer = _TaskTimer(delay, callback)
        self._tasks.add(timer.task)
        timer.task.add_done_callback(self._on_done)
        return timer

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        """Cancel everything still waiting."""
        for task in tuple(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Timer callback failed", exc_info=exc)


__all__ = (
    "TimerCallback",
    "TimerHandle",
    "Scheduler",
    "AsyncioScheduler",
)
