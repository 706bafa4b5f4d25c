"""Tests for async_caller.ratelimit - TokenBucket and RateGate."""

from __future__ import annotations

import asyncio

import pytest

from async_caller.models import TokenBucketOptions
from async_caller.ratelimit import RateGate, RateLimiter, TokenBucket


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


def _bucket(clock: FakeClock, **overrides) -> TokenBucket:
    params = {"capacity": 2, "fill_per_window": 1, "window_in_ms": 100}
    params.update(overrides)
    return TokenBucket(TokenBucketOptions(**params), clock=clock)


class TestTokenBucket:
    """Test token accounting, refill and forced holds."""

    def test_starts_full(self):
        clock = FakeClock()
        bucket = _bucket(clock)
        assert bucket.try_consume() is True
        assert bucket.try_consume() is True
        assert bucket.try_consume() is False

    def test_initial_tokens(self):
        clock = FakeClock()
        bucket = _bucket(clock, initial_tokens=0)
        assert bucket.try_consume() is False
        clock.advance_ms(150)
        assert bucket.try_consume() is True

    def test_refill_per_window_capped_at_capacity(self):
        clock = FakeClock()
        bucket = _bucket(clock, initial_tokens=0)
        clock.advance_ms(1000)
        assert bucket.tokens == 2

    def test_partial_window_does_not_refill(self):
        clock = FakeClock()
        bucket = _bucket(clock, initial_tokens=0)
        clock.advance_ms(99)
        assert bucket.try_consume() is False
        assert bucket.ms_until_next_token() == pytest.approx(1, abs=1e-6)

    def test_ms_until_next_token_zero_when_available(self):
        bucket = _bucket(FakeClock())
        assert bucket.ms_until_next_token() == 0.0

    def test_forced_hold_blocks_tokens(self):
        clock = FakeClock()
        bucket = _bucket(clock)
        bucket.force_wait_until_ms_passed(5000)
        assert bucket.try_consume() is False
        assert bucket.ms_until_next_token() == pytest.approx(5000)
        clock.advance_ms(5000)
        assert bucket.try_consume() is True

    def test_hold_only_extends(self):
        clock = FakeClock()
        bucket = _bucket(clock)
        bucket.force_wait_until_ms_passed(5000)
        bucket.force_wait_until_ms_passed(1000)
        clock.advance_ms(2000)
        assert bucket.try_consume() is False

    @pytest.mark.asyncio
    async def test_async_consume(self):
        bucket = _bucket(FakeClock(), capacity=1)
        assert await bucket.consume() is True
        assert await bucket.consume() is False


class ScriptedLimiter(RateLimiter):
    """Refuses a fixed number of times, then grants."""

    def __init__(self, refusals: int = 0) -> None:
        self.refusals = refusals
        self.consume_calls = 0
        self.holds: list[float] = []

    async def consume(self) -> bool:
        self.consume_calls += 1
        if self.refusals > 0:
            self.refusals -= 1
            return False
        return True

    def ms_until_next_token(self) -> float:
        return 0.0

    def force_wait_until_ms_passed(self, delay_ms: float) -> None:
        self.holds.append(delay_ms)


class TestRateGate:
    """Test RateGate acquire and hold_off."""

    @pytest.mark.asyncio
    async def test_acquire_immediate(self):
        limiter = ScriptedLimiter()
        await RateGate(limiter).acquire()
        assert limiter.consume_calls == 1

    @pytest.mark.asyncio
    async def test_acquire_waits_until_granted(self):
        limiter = ScriptedLimiter(refusals=3)
        await RateGate(limiter).acquire()
        assert limiter.consume_calls == 4

    @pytest.mark.asyncio
    async def test_acquire_with_real_bucket_refill(self):
        """Drained bucket grants again once a (short) window passes."""
        bucket = TokenBucket(
            TokenBucketOptions(capacity=1, fill_per_window=1, window_in_ms=20),
        )
        gate = RateGate(bucket)
        await gate.acquire()
        await asyncio.wait_for(gate.acquire(), timeout=2)

    def test_hold_off_forwards(self):
        limiter = ScriptedLimiter()
        RateGate(limiter).hold_off(5000)
        assert limiter.holds == [5000]
