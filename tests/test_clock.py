"""Tests for the Clock implementations."""

from __future__ import annotations

import asyncio

import pytest

from computelab.clock import ManualClock, SystemClock


class TestManualClock:
    """Virtual time only moves on advance()."""

    def test_now_starts_at_origin(self):
        clock = ManualClock(start=100.0)
        assert clock.now() == 100.0
        assert clock.monotonic() == 0.0

    @pytest.mark.asyncio
    async def test_sleep_wakes_at_deadline(self):
        clock = ManualClock(start=0.0)
        woke: list[float] = []

        async def sleeper():
            await clock.sleep(2.0)
            woke.append(clock.now())

        task = asyncio.create_task(sleeper())
        await clock.advance(1.0)
        assert woke == []
        await clock.advance(1.0)
        assert woke == [2.0]
        await task

    @pytest.mark.asyncio
    async def test_repeated_sleeps_inside_one_advance(self):
        """A sleeper that sleeps again within the window is woken again."""
        clock = ManualClock(start=0.0)
        ticks: list[float] = []

        async def ticker():
            while True:
                await clock.sleep(1.0)
                ticks.append(clock.now())

        task = asyncio.create_task(ticker())
        await clock.advance(5.0)
        assert ticks == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert clock.now() == 5.0

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_sleepers_wake_in_deadline_order(self):
        clock = ManualClock(start=0.0)
        order: list[str] = []

        async def sleeper(name: str, delay: float):
            await clock.sleep(delay)
            order.append(name)

        tasks = [
            asyncio.create_task(sleeper("late", 3.0)),
            asyncio.create_task(sleeper("early", 1.0)),
            asyncio.create_task(sleeper("middle", 2.0)),
        ]
        await clock.advance(3.0)
        assert order == ["early", "middle", "late"]
        await asyncio.gather(*tasks)

    @pytest.mark.asyncio
    async def test_cancelled_sleeper_is_skipped(self):
        clock = ManualClock(start=0.0)

        task = asyncio.create_task(clock.sleep(1.0))
        await asyncio.sleep(0)
        assert clock.pending == 1

        task.cancel()
        await asyncio.sleep(0)
        await clock.advance(2.0)
        assert clock.pending == 0
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_cannot_go_backwards(self):
        clock = ManualClock()
        with pytest.raises(ValueError):
            await clock.advance(-1.0)


class TestSystemClock:

    @pytest.mark.asyncio
    async def test_sleep_zero_returns(self):
        clock = SystemClock()
        before = clock.monotonic()
        await clock.sleep(0)
        assert clock.monotonic() >= before
        assert clock.now() > 0
