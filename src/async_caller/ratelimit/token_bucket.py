"""RateLimiter ABC and the default asyncio token bucket.

The retry engine only needs three things from a limiter: a
non-blocking "take one token" check, an estimate of when the next
token appears, and a way to withhold tokens for a server-mandated
duration. Anything implementing RateLimiter can be plugged in.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from async_caller.models.options import TokenBucketOptions

logger = logging.getLogger(__name__)


class RateLimiter(ABC):
    """Abstract rate limiting capability consumed by RateGate."""

    @abstractmethod
    async def consume(self) -> bool:
        """Try to take one token. Returns True if it was granted."""
        ...

    @abstractmethod
    def ms_until_next_token(self) -> float:
        """Estimate how long until consume() can succeed, in milliseconds."""
        ...

    @abstractmethod
    def force_wait_until_ms_passed(self, delay_ms: float) -> None:
        """Withhold every token until ``delay_ms`` from now has elapsed."""
        ...


class TokenBucket(RateLimiter):
    """Token bucket with discrete window refills.

    Every full ``window_in_ms`` that elapses adds ``fill_per_window``
    tokens, capped at ``capacity``. A forced hold blocks consumption
    regardless of the token count and can only be extended.

    Args:
        options: Bucket capacity and refill settings.
        clock: Monotonic clock in seconds. Injectable for tests.
    """

    def __init__(
        self,
        options: TokenBucketOptions,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._capacity = options.capacity
        self._fill_per_window = options.fill_per_window
        self._window_s = options.window_in_ms / 1000
        self._clock = clock
        initial = options.capacity if options.initial_tokens is None else options.initial_tokens
        self._tokens = float(min(initial, options.capacity))
        self._last_refill = clock()
        self._hold_until = 0.0

    @property
    def tokens(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        windows = int((now - self._last_refill) // self._window_s)
        if windows <= 0:
            return
        self._last_refill += windows * self._window_s
        self._tokens = min(
            float(self._capacity),
            self._tokens + windows * self._fill_per_window,
        )

    def try_consume(self) -> bool:
        """Synchronous form of consume()."""
        if self._clock() < self._hold_until:
            return False
        self._refill()
        if self._tokens >= 1:
            self._tokens -= 1
            return True
        return False

    async def consume(self) -> bool:
        return self.try_consume()

    def ms_until_next_token(self) -> float:
        now = self._clock()
        if now < self._hold_until:
            return (self._hold_until - now) * 1000
        self._refill()
        if self._tokens >= 1:
            return 0.0
        return max(0.0, (self._last_refill + self._window_s - now) * 1000)

    def force_wait_until_ms_passed(self, delay_ms: float) -> None:
        hold_until = self._clock() + max(0.0, delay_ms) / 1000
        if hold_until > self._hold_until:
            self._hold_until = hold_until
            logger.debug(f"Token bucket held for {delay_ms:.0f}ms")
