"""Timer services used by the attempt countdown and the upload simulation.

Both schedulers are cooperative: callbacks run one at a time on the owner's
thread (the asyncio loop, or whoever calls ``ManualScheduler.advance``), so
the core never needs locks. ``ManualScheduler`` keeps a virtual clock and is
what tests and the terminal front ends use.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from typing import Any, Callable, List, Optional, Protocol, Tuple


log = logging.getLogger(__name__)

Callback = Callable[..., Any]


class TimerHandle:
    """Cancellable reference to a scheduled callback. ``cancel`` is idempotent."""

    def __init__(self, interval: Optional[float] = None):
        self.interval = interval
        self.cancelled = False
        self._on_cancel: Optional[Callable[[], None]] = None

    @property
    def recurring(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
            self._on_cancel = None


class Scheduler(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay: float, fn: Callback, *args: Any) -> TimerHandle: ...

    def call_every(self, interval: float, fn: Callback, *args: Any) -> TimerHandle: ...


def _check_delay(delay: float) -> float:
    d = float(delay)
    if d < 0:
        raise ValueError("delay must be non-negative")
    return d


class ManualScheduler:
    """Virtual-clock scheduler; time only moves when ``advance`` is called."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, TimerHandle, Callback, tuple]] = []

    def now(self) -> float:
        return self._now

    def _push(self, due: float, handle: TimerHandle, fn: Callback, args: tuple) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle, fn, args))

    def call_later(self, delay: float, fn: Callback, *args: Any) -> TimerHandle:
        handle = TimerHandle()
        self._push(self._now + _check_delay(delay), handle, fn, args)
        return handle

    def call_every(self, interval: float, fn: Callback, *args: Any) -> TimerHandle:
        step = _check_delay(interval)
        if step == 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(interval=step)
        self._push(self._now + step, handle, fn, args)
        return handle

    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in order. Returns how many fired."""

        target = self._now + _check_delay(seconds)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn, args = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            fired += 1
            fn(*args)
            if handle.recurring and not handle.cancelled:
                self._push(due + float(handle.interval), handle, fn, args)
        self._now = target
        return fired

    def run_until_idle(self, limit: float = 3600.0) -> int:
        """Advance until nothing is pending or ``limit`` virtual seconds pass."""

        fired = 0
        deadline = self._now + limit
        while self.pending() and self._now < deadline:
            live = [entry[0] for entry in self._queue if not entry[2].cancelled]
            fired += self.advance(max(0.0, min(live) - self._now))
        return fired


class AsyncioScheduler:
    """Schedules on the running asyncio loop; callers must be inside that loop."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, fn: Callback, *args: Any) -> TimerHandle:
        loop = asyncio.get_running_loop()
        handle = TimerHandle()
        inner = loop.call_later(_check_delay(delay), fn, *args)
        handle._on_cancel = inner.cancel
        return handle

    def call_every(self, interval: float, fn: Callback, *args: Any) -> TimerHandle:
        loop = asyncio.get_running_loop()
        step = _check_delay(interval)
        if step == 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(interval=step)

        def _fire() -> None:
            if handle.cancelled:
                return
            try:
                fn(*args)
            except Exception:
                log.exception("recurring timer callback %r failed", fn)
            if not handle.cancelled:
                _arm()

        def _arm() -> None:
            inner = loop.call_later(step, _fire)
            handle._on_cancel = inner.cancel

        _arm()
        return handle


__all__ = ["TimerHandle", "Scheduler", "ManualScheduler", "AsyncioScheduler"]
