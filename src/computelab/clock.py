"""
Clock abstraction for the lifecycle scheduler.

The scheduler never calls ``time`` or ``asyncio.sleep`` directly; it asks a
Clock. ``SystemClock`` is backed by the real event loop, ``ManualClock`` keeps
virtual time that only moves when ``advance()`` is awaited, so lifecycle tests
run deterministically and instantly.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of timestamps and timed waits."""

    @abstractmethod
    def now(self) -> float:
        """Wall-clock time as epoch seconds."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Monotonic reading for measuring elapsed time."""
        ...

    @abstractmethod
    async def sleep(self, delay: float) -> None:
        """Suspend the calling task for ``delay`` seconds of clock time."""
        ...


class SystemClock(Clock):
    """Real time, driven by the running event loop."""

    def now(self) -> float:
        return time.time()

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(max(0.0, delay))


class ManualClock(Clock):
    """Virtual time for tests.

    Sleepers are parked on futures ordered by deadline. ``advance()`` wakes
    them one deadline at a time and lets the woken tasks run before moving
    on, so a sleeper that immediately sleeps again inside the same window is
    woken too.

    Usage:
        clock = ManualClock()
        service = build_service(clock=clock)
        job = await service.manager.submit("structure_prediction", {})
        await clock.advance(2.0)   # job is now running
    """

    def __init__(self, start: float = 1_700_000_000.0, settle_rounds: int = 10):
        self._now = start
        self._origin = start
        self._settle_rounds = settle_rounds
        self._sleepers: list[tuple[float, int, asyncio.Future[None]]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def monotonic(self) -> float:
        return self._now - self._origin

    @property
    def pending(self) -> int:
        """Number of sleepers still waiting."""
        return sum(1 for _, _, fut in self._sleepers if not fut.done())

    async def sleep(self, delay: float) -> None:
        if delay <= 0:
            await asyncio.sleep(0)
            return
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._now + delay, next(self._seq), future))
        await future

    async def advance(self, seconds: float) -> None:
        """Move time forward, waking every sleeper due within the window."""
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards")
        target = self._now + seconds
        await self._settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            if future.done():
                # Sleeper was cancelled
                continue
            self._now = max(self._now, deadline)
            future.set_result(None)
            await self._settle()
        self._now = target
        await self._settle()

    async def _settle(self) -> None:
        for _ in range(self._settle_rounds):
            await asyncio.sleep(0)


__all__ = ["Clock", "SystemClock", "ManualClock"]
