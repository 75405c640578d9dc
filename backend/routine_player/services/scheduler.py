"""
Clocks
======
The session never owns real time. It asks a Clock for a repeating tick
or a one-shot deferred call and gets back a handle it can cancel.

Two implementations:
    ManualClock   time moves only when ``advance()`` is called. Used by
                  the tests and by the HTTP surface, where the client
                  drives time.
    AsyncioClock  backed by the running event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Optional, Protocol

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Clock(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callback) -> TimerHandle: ...


# ---------------------------------------------------------------------------
# Manual clock
# ---------------------------------------------------------------------------

class _ManualHandle:
    def __init__(self, callback: Callback, interval: Optional[float]) -> None:
        self.callback = callback
        self.interval = interval
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualClock:
    """Deterministic clock advanced explicitly."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, _ManualHandle]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> _ManualHandle:
        handle = _ManualHandle(callback, interval=None)
        self._push(self._now + delay, handle)
        return handle

    def call_every(self, interval: float, callback: Callback) -> _ManualHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = _ManualHandle(callback, interval=interval)
        self._push(self._now + interval, handle)
        return handle

    def advance(self, seconds: float) -> int:
        """Move time forward by *seconds*, firing everything that falls due.

        Callbacks scheduled while advancing fire in the same call if they
        fall due before the target time. Returns the number of callbacks run.
        """
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            if handle.interval is not None:
                self._push(due + handle.interval, handle)
            handle.callback()
            fired += 1
        self._now = target
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def _push(self, due: float, handle: _ManualHandle) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle))


# ---------------------------------------------------------------------------
# Asyncio clock
# ---------------------------------------------------------------------------

class _RepeatingHandle:
    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callback) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._next_due = loop.time() + interval
        self._timer = loop.call_at(self._next_due, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Schedule from the ideal due time so ticks do not drift
        self._next_due += self._interval
        self._timer = self._loop.call_at(self._next_due, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class _OneShotHandle:
    def __init__(self, timer: asyncio.TimerHandle) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._timer.cancelled()


class AsyncioClock:
    """Real-time clock on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callback) -> _OneShotHandle:
        return _OneShotHandle(self.loop.call_later(delay, callback))

    def call_every(self, interval: float, callback: Callback) -> _RepeatingHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return _RepeatingHandle(self.loop, interval, callback)
