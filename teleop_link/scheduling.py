"""
Periodic task scheduling.

Every timer in the link (input sampling, coalescing, the reconnection watchdog)
goes through a Scheduler so the logic can run against a simulated clock in tests
and against the asyncio loop in production. Callbacks always run on the loop
thread, one at a time.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class PeriodicTask(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def time(self) -> float: ...

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> PeriodicTask: ...


class LoopTask:
    """
    Repeating loop.call_at() chain. Deadlines advance by a fixed step so the
    cadence does not drift with callback latency.
    """
    def __init__(self, loop: asyncio.AbstractEventLoop, interval_s: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval_s = interval_s
        self._callback = callback
        self._deadline = loop.time() + interval_s
        self._handle: Optional[asyncio.TimerHandle] = loop.call_at(self._deadline, self._fire)

    @property
    def active(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        # Schedule the next run first: the callback is allowed to cancel us.
        self._deadline += self._interval_s
        now = self._loop.time()
        if self._deadline < now:
            # we fell behind (suspended laptop, blocked loop); skip missed ticks
            self._deadline = now + self._interval_s
        self._handle = self._loop.call_at(self._deadline, self._fire)
        self._callback()


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def time(self) -> float:
        return self._loop.time()

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> LoopTask:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s!r}")
        return LoopTask(self._loop, interval_s, callback)
