"""AdmissionQueue: FIFO admission with a fixed number of execution slots.

Like asyncio.Semaphore, but dispatch always hands the freed slot to
the oldest waiter and occupancy is observable. All state is touched
from the event loop thread only, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class AdmissionQueue:
    """Bounds how many calls (retries included) run at once."""

    def __init__(self, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._concurrency = concurrency
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def running(self) -> int:
        return self._running

    @property
    def pending(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    def _dispatch(self) -> None:
        while self._running < self._concurrency and self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                # cancelled while queued
                continue
            self._running += 1
            logger.debug(
                f"Running task... Concurrency: ({self._running} / {self._concurrency}) "
                f"(Queue length: {len(self._waiters)})"
            )
            waiter.set_result(None)

    async def acquire(self) -> None:
        """Wait for a slot. Waiters are admitted strictly in arrival order."""
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._dispatch()
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # slot was granted just before the cancellation landed
                self.release()
            raise

    def release(self) -> None:
        """Free a slot and admit the next waiter, if any."""
        if self._running <= 0:
            raise RuntimeError("release() called without a matching acquire()")
        self._running -= 1
        self._dispatch()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold a slot for the duration of the block."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()
