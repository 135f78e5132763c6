"""Tests for replsession.line_queue.LineQueue."""

from __future__ import annotations

import asyncio

import pytest

from replsession.errors import QueueClosedError
from replsession.line_queue import LineQueue


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class TestLineQueueOrdering:
    @pytest.mark.asyncio()
    async def test_fifo(self) -> None:
        q = LineQueue()
        for line in ("a", "b", "c"):
            await q.put(line)
        assert [await q.get() for _ in range(3)] == ["a", "b", "c"]

    @pytest.mark.asyncio()
    async def test_get_waits_for_put(self) -> None:
        q = LineQueue()
        getter = asyncio.create_task(q.get())
        await asyncio.sleep(0)
        assert not getter.done()
        await q.put("late")
        assert await asyncio.wait_for(getter, timeout=1.0) == "late"


# ---------------------------------------------------------------------------
# Capacity
# ---------------------------------------------------------------------------


class TestLineQueueCapacity:
    @pytest.mark.asyncio()
    async def test_put_blocks_when_full(self) -> None:
        q = LineQueue(maxsize=1)
        await q.put("first")
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(q.put("second"), timeout=0.05)

    @pytest.mark.asyncio()
    async def test_get_frees_room(self) -> None:
        q = LineQueue(maxsize=1)
        await q.put("first")
        putter = asyncio.create_task(q.put("second"))
        await asyncio.sleep(0)
        assert not putter.done()
        assert await q.get() == "first"
        await asyncio.wait_for(putter, timeout=1.0)
        assert await q.get() == "second"


# ---------------------------------------------------------------------------
# Closing
# ---------------------------------------------------------------------------


class TestLineQueueClose:
    @pytest.mark.asyncio()
    async def test_closed_and_drained_returns_none(self) -> None:
        q = LineQueue()
        await q.close()
        assert await q.get() is None
        # End-of-stream is permanent
        assert await q.get() is None

    @pytest.mark.asyncio()
    async def test_close_keeps_pending_lines(self) -> None:
        q = LineQueue()
        await q.put("one")
        await q.put("two")
        await q.close()
        assert await q.get() == "one"
        assert await q.get() == "two"
        assert await q.get() is None

    @pytest.mark.asyncio()
    async def test_put_after_close_raises(self) -> None:
        q = LineQueue()
        await q.close()
        with pytest.raises(QueueClosedError):
            await q.put("too late")

    @pytest.mark.asyncio()
    async def test_double_close_is_safe(self) -> None:
        q = LineQueue()
        await q.close()
        await q.close()
        assert q.closed
        assert await q.get() is None

    @pytest.mark.asyncio()
    async def test_close_wakes_waiting_getter(self) -> None:
        q = LineQueue()
        getter = asyncio.create_task(q.get())
        await asyncio.sleep(0)
        await q.close()
        assert await asyncio.wait_for(getter, timeout=1.0) is None

    @pytest.mark.asyncio()
    async def test_close_wakes_blocked_putter(self) -> None:
        q = LineQueue(maxsize=1)
        await q.put("full")
        putter = asyncio.create_task(q.put("blocked"))
        await asyncio.sleep(0)
        await q.close()
        with pytest.raises(QueueClosedError):
            await asyncio.wait_for(putter, timeout=1.0)
