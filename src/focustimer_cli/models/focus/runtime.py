"""Timer runtimes driving the focus timer.

Everything runs on one cooperative thread. A runtime supplies the current time
and one-shot timers; the controller and the attention scheduler arm and cancel
their own timers through it.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerRuntime(Protocol):
    def now(self) -> datetime: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioRuntime:
    """Runtime backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> datetime:
        return datetime.now().astimezone()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)


class VirtualTimer:
    """Handle for a callback scheduled on a ``VirtualRuntime``."""

    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: datetime, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualRuntime:
    """Manually advanced clock.

    ``advance`` moves time forward and fires every timer that falls due, in
    deadline order (ties in scheduling order), with the clock set to each
    timer's deadline while its callback runs. Callbacks may schedule further
    timers; those fire too if they fall inside the advanced window.
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime.now().astimezone()
        self._queue: list[tuple[datetime, int, VirtualTimer]] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> VirtualTimer:
        timer = VirtualTimer(self._now + timedelta(seconds=max(0.0, delay)), callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of armed, not yet cancelled timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def next_due(self) -> datetime | None:
        for due, _, timer in sorted(self._queue):
            if not timer.cancelled:
                return due
        return None

    def fire_next(self) -> bool:
        """Jump to the next armed timer and fire it. Returns False if none is armed."""
        while self._queue:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = max(self._now, due)
            timer.callback()
            return True
        return False

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers. Returns how many fired."""
        deadline = self._now + timedelta(seconds=seconds)
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.callback()
            fired += 1
        self._now = deadline
        return fired

    def run_until(self, predicate: Callable[[], bool], limit: float = 24 * 3600) -> bool:
        """Fire timers one by one until ``predicate`` holds or ``limit`` seconds pass."""
        end = self._now + timedelta(seconds=limit)
        while not predicate():
            due = self.next_due()
            if due is None or due > end:
                return False
            self.fire_next()
        return True
