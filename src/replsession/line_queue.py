"""Closable FIFO of lines shared between session workers."""

from __future__ import annotations

import asyncio
from collections import deque

from replsession.errors import QueueClosedError


class LineQueue:
    """Async FIFO with an optional capacity and a one-way close.

    * ``put`` suspends while the queue is full and raises
      ``QueueClosedError`` once the queue is closed.
    * ``get`` suspends while the queue is empty.  After ``close()`` the
      remaining lines are still handed out; once drained every ``get``
      returns ``None``.
    * ``close`` is idempotent and wakes every waiter.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._items: deque[str] = deque()
        self._maxsize = maxsize
        self._closed = False
        self._cond = asyncio.Condition()

    def _full(self) -> bool:
        return self._maxsize > 0 and len(self._items) >= self._maxsize

    async def put(self, line: str) -> None:
        async with self._cond:
            await self._cond.wait_for(lambda: self._closed or not self._full())
            if self._closed:
                raise QueueClosedError("put on a closed line queue")
            self._items.append(line)
            self._cond.notify_all()

    async def get(self) -> str | None:
        """Return the next line, or ``None`` once closed and drained."""
        async with self._cond:
            await self._cond.wait_for(lambda: self._items or self._closed)
            if not self._items:
                return None
            line = self._items.popleft()
            self._cond.notify_all()
            return line

    async def close(self) -> None:
        async with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

