"""Tests for ConfirmationQueue — ordering, backpressure, close, put_back."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from src.agent.exceptions import QueueClosedError
from src.agent.queues import ConfirmationQueue
from src.core.types import Confirmation


def _conf(alert_id: str) -> Confirmation:
    return Confirmation(
        alert_id=alert_id,
        client_id="c-1",
        confirmed_at=datetime(2024, 1, 1, tzinfo=UTC),
        hostname="desk",
        username="ops",
    )


class TestOrdering:
    async def test_fifo(self) -> None:
        q = ConfirmationQueue()
        for i in range(3):
            await q.put(_conf(f"a{i}"))
        got = [(await q.get()).alert_id for _ in range(3)]
        assert got == ["a0", "a1", "a2"]

    async def test_put_back_served_first(self) -> None:
        q = ConfirmationQueue()
        await q.put(_conf("a0"))
        await q.put(_conf("a1"))
        first = await q.get()
        q.put_back(first)
        assert q.qsize() == 2
        assert (await q.get()).alert_id == "a0"
        assert (await q.get()).alert_id == "a1"
        assert q.empty()


class TestBackpressure:
    async def test_put_blocks_when_full(self) -> None:
        q = ConfirmationQueue(maxsize=1)
        await q.put(_conf("a0"))
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(q.put(_conf("a1")), timeout=0.05)

    async def test_blocked_put_resumes_after_get(self) -> None:
        q = ConfirmationQueue(maxsize=1)
        await q.put(_conf("a0"))
        pending = asyncio.create_task(q.put(_conf("a1")))
        await asyncio.sleep(0.01)
        assert not pending.done()
        await q.get()
        await asyncio.wait_for(pending, timeout=1.0)
        assert (await q.get()).alert_id == "a1"


class TestClose:
    async def test_put_after_close_raises(self) -> None:
        q = ConfirmationQueue()
        q.close()
        assert q.closed is True
        with pytest.raises(QueueClosedError):
            await q.put(_conf("a0"))

    async def test_items_still_drainable_after_close(self) -> None:
        q = ConfirmationQueue()
        await q.put(_conf("a0"))
        q.close()
        assert (await q.get()).alert_id == "a0"

    async def test_close_fails_blocked_producer(self) -> None:
        q = ConfirmationQueue(maxsize=1)
        await q.put(_conf("a0"))
        blocked = asyncio.create_task(q.put(_conf("a1")))
        await asyncio.sleep(0.01)
        assert not blocked.done()

        q.close()
        with pytest.raises(QueueClosedError):
            await asyncio.wait_for(blocked, timeout=0.5)
        # The item already queued is untouched; the rejected one never lands.
        assert q.qsize() == 1
        assert (await q.get()).alert_id == "a0"

    async def test_close_fails_every_blocked_producer(self) -> None:
        q = ConfirmationQueue(maxsize=1)
        await q.put(_conf("a0"))
        blocked = [asyncio.create_task(q.put(_conf(f"b{i}"))) for i in range(3)]
        await asyncio.sleep(0.01)

        q.close()
        results = await asyncio.wait_for(
            asyncio.gather(*blocked, return_exceptions=True), timeout=0.5
        )
        assert all(isinstance(r, QueueClosedError) for r in results)
