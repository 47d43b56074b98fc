"""FIFO-fair counting semaphore bounding simultaneous chunk transfers."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any

from docupload.uploaders.constants import MAX_CONCURRENT_CHUNKS


class ChunkLimiter:
    """Counting semaphore that admits waiters strictly in arrival order.

    ``release()`` hands the freed slot straight to the longest waiter, so a
    late ``acquire()`` can never overtake a queued one.
    """

    def __init__(self, capacity: int = MAX_CONCURRENT_CHUNKS) -> None:
        if capacity < 1:
            raise ValueError(f"Limiter capacity must be at least 1: {capacity}")
        self._capacity = capacity
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        """Number of slots currently held."""
        return self._running

    @property
    def waiting(self) -> int:
        """Number of callers suspended in ``acquire()``."""
        return len(self._waiters)

    def locked(self) -> bool:
        """Check if an ``acquire()`` would suspend."""
        return self._running >= self._capacity

    async def acquire(self) -> None:
        """Take a slot, suspending until one is free."""
        if self._running < self._capacity and not self._waiters:
            self._running += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation; pass it on
                self.release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Free a slot, waking the longest waiter if any.

        Raises:
            RuntimeError: If no slot is held.
        """
        if self._running <= 0:
            raise RuntimeError("ChunkLimiter released too many times")

        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Slot ownership transfers without touching the counter
                waiter.set_result(None)
                return
        self._running -= 1

    async def __aenter__(self) -> "ChunkLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.release()
