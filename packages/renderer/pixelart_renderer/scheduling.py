"""Single-shot timer backends for the slideshow."""

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
from dataclasses import dataclass, field
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Cooperative timers on an asyncio event loop (the running loop by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_s, callback)


class ThreadingScheduler:
    """Daemon ``threading.Timer`` per call; callbacks run on the timer thread."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass(order=True)
class VirtualTimer:
    deadline_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Simulated clock. Nothing fires until :meth:`advance` is called."""

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._queue: list[VirtualTimer] = []
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = VirtualTimer(self.now_ms + max(0.0, delay_s) * 1000.0, next(self._seq), callback)
        heapq.heappush(self._queue, timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing due timers in deadline order.

        Timers armed by callbacks during the window fire too if they fall due
        before the new time. Returns the number of callbacks run.
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0].deadline_ms <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = timer.deadline_ms
            timer.callback()
            fired += 1
        self.now_ms = target
        return fired
