"""
Tests for the clocks
====================
Covers:
- ManualClock: one-shot fires once at its due time
- ManualClock: repeating fires every interval, stops once cancelled
- ManualClock: callbacks scheduled while advancing fire in the same advance
- ManualClock: cancelling from inside the callback
- ManualClock: non-positive interval rejected
- AsyncioClock: repeating and one-shot calls on a running loop

Run: pytest tests/test_scheduler.py -v
"""

from __future__ import annotations

import asyncio

import pytest

from routine_player.services.scheduler import AsyncioClock, ManualClock


class TestManualClock:

    def test_one_shot(self):
        clock = ManualClock()
        fired = []
        clock.call_later(2.0, lambda: fired.append(clock.now()))

        clock.advance(1)
        assert fired == []
        clock.advance(1)
        assert fired == [2.0]
        clock.advance(5)
        assert fired == [2.0]

    def test_repeating(self):
        clock = ManualClock()
        fired = []
        handle = clock.call_every(1.0, lambda: fired.append(clock.now()))

        clock.advance(3)
        assert fired == [1.0, 2.0, 3.0]

        handle.cancel()
        clock.advance(3)
        assert len(fired) == 3
        assert handle.cancelled is True

    def test_chained_scheduling_within_one_advance(self):
        clock = ManualClock()
        fired = []
        clock.call_later(1.0, lambda: clock.call_later(1.0, lambda: fired.append(clock.now())))

        assert clock.advance(5) == 2
        assert fired == [2.0]
        assert clock.now() == 5.0

    def test_cancel_from_inside_callback(self):
        clock = ManualClock()
        fired = []
        holder = {}

        def _tick():
            fired.append(clock.now())
            if len(fired) == 2:
                holder["handle"].cancel()

        holder["handle"] = clock.call_every(1.0, _tick)
        clock.advance(10)
        assert fired == [1.0, 2.0]
        assert clock.pending == 0

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            ManualClock().call_every(0, lambda: None)


class TestAsyncioClock:

    @pytest.mark.asyncio
    async def test_repeating_ticks(self):
        clock = AsyncioClock()
        fired = []
        handle = clock.call_every(0.01, lambda: fired.append(1))

        await asyncio.sleep(0.055)
        handle.cancel()
        count = len(fired)
        await asyncio.sleep(0.03)

        assert count >= 3
        assert len(fired) == count
        assert handle.cancelled is True

    @pytest.mark.asyncio
    async def test_one_shot_can_be_cancelled(self):
        clock = AsyncioClock()
        fired = []
        kept = clock.call_later(0.01, lambda: fired.append("kept"))
        dropped = clock.call_later(0.01, lambda: fired.append("dropped"))
        dropped.cancel()

        await asyncio.sleep(0.03)
        assert fired == ["kept"]
        assert kept.cancelled is False
        assert dropped.cancelled is True
