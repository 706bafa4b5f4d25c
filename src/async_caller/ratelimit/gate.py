"""RateGate: blocks each attempt until the rate limiter grants a token."""

from __future__ import annotations

import asyncio

from async_caller.ratelimit.token_bucket import RateLimiter

# Lower bound on the sleep between checks when a limiter reports 0ms
# but still refuses, e.g. another waiter took the token first.
MIN_WAIT_MS = 1.0


class RateGate:
    """Adapter between the retry engine and a RateLimiter."""

    def __init__(self, limiter: RateLimiter) -> None:
        self._limiter = limiter

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    async def acquire(self) -> None:
        """Suspend until a token has been granted.

        Sleeps for the limiter's own estimate between checks rather
        than spinning, so a waiter wakes roughly once per refill.
        """
        while not await self._limiter.consume():
            wait_ms = max(self._limiter.ms_until_next_token(), MIN_WAIT_MS)
            await asyncio.sleep(wait_ms / 1000)

    def hold_off(self, delay_ms: float) -> None:
        """Stop the limiter granting tokens until ``delay_ms`` has passed."""
        self._limiter.force_wait_until_ms_passed(delay_ms)
