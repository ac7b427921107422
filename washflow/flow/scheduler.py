"""
Timer and background-task scheduling on the app's event loop.

Everything time-driven in the flow (broadcast resolution, the elapsed-time
tick, the non-awaited logout call) goes through a Scheduler so that the
owner of each timer holds an explicit handle it can cancel, and tests can
swap in a manual clock.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Timers plus fire-and-forget tasks."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> None: ...


class AsyncioScheduler:
    """Scheduler bound to an asyncio event loop (the running one by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> None:
        task = self.loop.create_task(coro, name=name)
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)


class RepeatingTimer:
    """Fires ``callback`` every ``interval`` seconds until cancelled."""

    def __init__(self, scheduler: Scheduler, interval: float, callback: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = scheduler.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._callback()
        if not self._cancelled:
            self._handle = self._scheduler.call_later(self._interval, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._cancelled
