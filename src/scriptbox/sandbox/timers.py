"""Realm-scoped timers (``set_timeout`` / ``set_interval``).

Callbacks never run concurrently with the program: they are queued and
drained in due order after the main program returns, inside the realm
process and under the same deadline.  When the realm process goes away,
so does every pending timer.
"""

from __future__ import annotations

import heapq
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

MIN_INTERVAL = 0.001


@dataclass
class _Timer:
    callback: Callable[..., Any]
    args: tuple[Any, ...]
    interval: float | None


class RealmTimers:
    """Timer queue owned by a single realm.

    Parameters
    ----------
    clock, sleep:
        Injectable for tests.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._heap: list[tuple[float, int, int]] = []
        self._timers: dict[int, _Timer] = {}
        self._seq = itertools.count()
        self._handles = itertools.count(1)

    def _schedule(self, handle: int, delay: float) -> None:
        heapq.heappush(self._heap, (self._clock() + delay, next(self._seq), handle))

    def set_timeout(self, callback: Callable[..., Any], delay: float = 0.0, *args: Any) -> int:
        """Run ``callback(*args)`` once, *delay* seconds from now.  Returns a handle."""
        if not callable(callback):
            raise TypeError("set_timeout() callback must be callable")
        handle = next(self._handles)
        self._timers[handle] = _Timer(callback, args, None)
        self._schedule(handle, max(0.0, float(delay)))
        return handle

    def set_interval(self, callback: Callable[..., Any], interval: float, *args: Any) -> int:
        """Run ``callback(*args)`` every *interval* seconds until cleared."""
        if not callable(callback):
            raise TypeError("set_interval() callback must be callable")
        period = max(MIN_INTERVAL, float(interval))
        handle = next(self._handles)
        self._timers[handle] = _Timer(callback, args, period)
        self._schedule(handle, period)
        return handle

    def clear(self, handle: int | None) -> None:
        """Cancel a pending timer.  Unknown or spent handles are ignored."""
        self._timers.pop(handle, None)  # type: ignore[arg-type]

    @property
    def pending(self) -> int:
        return len(self._timers)

    def run_pending(self) -> None:
        """Fire timers in due order until none are left.

        Exceptions raised by a callback propagate.  An interval that is never
        cleared keeps this running until the realm is killed.
        """
        while self._heap:
            due, _, handle = heapq.heappop(self._heap)
            timer = self._timers.get(handle)
            if timer is None:
                continue
            wait = due - self._clock()
            if wait > 0:
                self._sleep(wait)
            if timer.interval is None:
                del self._timers[handle]
            timer.callback(*timer.args)
            if timer.interval is not None and handle in self._timers:
                self._schedule(handle, timer.interval)

    def discard(self) -> None:
        """Drop every pending timer without running it."""
        self._heap.clear()
        self._timers.clear()
