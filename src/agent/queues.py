"""Bounded outbound channel for confirmations awaiting transmission."""

from __future__ import annotations

import asyncio
from collections import deque

from src.agent.exceptions import QueueClosedError
from src.core.types import Confirmation


class ConfirmationQueue:
    """Multi-producer, single-consumer queue of confirmations.

    Lives for the whole process so nothing is lost between sessions.
    Producers block while the queue is full; once closed, ``put`` raises
    :class:`QueueClosedError` instead of dropping the item.
    """

    def __init__(self, maxsize: int = 100) -> None:
        self._queue: asyncio.Queue[Confirmation] = asyncio.Queue(maxsize=maxsize)
        # Items the consumer dequeued but failed to send; served first.
        self._retry: deque[Confirmation] = deque()
        self._closed = False
        self._closed_event = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def qsize(self) -> int:
        return self._queue.qsize() + len(self._retry)

    def empty(self) -> bool:
        return self.qsize() == 0

    async def put(self, confirmation: Confirmation) -> None:
        """Enqueue, waiting for room if the queue is full.

        Raises:
            QueueClosedError: the queue was closed before or while waiting.
        """
        if self._closed:
            raise QueueClosedError("confirmation queue is closed")
        if not self._queue.full():
            self._queue.put_nowait(confirmation)
            return

        put = asyncio.ensure_future(self._queue.put(confirmation))
        closed = asyncio.ensure_future(self._closed_event.wait())
        try:
            await asyncio.wait({put, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()
            if not put.done():
                put.cancel()

        if put.done() and not put.cancelled():
            put.result()
            return
        raise QueueClosedError("confirmation queue closed while waiting for room")

    async def get(self) -> Confirmation:
        """Dequeue the next confirmation, in enqueue order."""
        if self._retry:
            return self._retry.popleft()
        return await self._queue.get()

    def put_back(self, confirmation: Confirmation) -> None:
        """Return an unsent item so the next ``get`` yields it again."""
        self._retry.appendleft(confirmation)

    def close(self) -> None:
        """Refuse new items and fail producers blocked on a full queue."""
        self._closed = True
        self._closed_event.set()
