"""AsyncCaller: concurrency-bounded, rate-limited, retrying call wrapper.

Wraps arbitrary async operations (usually network calls) so that at
most ``concurrency`` of them run at once, every attempt passes through
a token bucket, and failed or rate-limited attempts are retried with
Retry-After aware exponential backoff.

Example:
    Ten requests per second, bursts of up to 20::

        caller = AsyncCaller(CallerConfig(
            token_bucket=TokenBucketOptions(
                capacity=20, fill_per_window=10, window_in_ms=1 * TimeUnit.SECONDS,
            ),
        ))
        response = await caller.call(client.get, "/items")
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from pathlib import Path
from typing import Any, TypeVar

from async_caller.classification import status
from async_caller.classification.identifier import DefaultResultIdentifier, ResultIdentifier
from async_caller.execution.delay import DelayCalculator
from async_caller.execution.queue import AdmissionQueue
from async_caller.execution.retry import RetryEngine
from async_caller.models.options import CallerConfig, load_caller_config
from async_caller.ratelimit.gate import RateGate
from async_caller.ratelimit.token_bucket import RateLimiter, TokenBucket

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncCaller:
    """Makes async calls with retry, concurrency, and rate limiting.

    Args:
        config: Token bucket, retry and concurrency settings. Defaults
            apply when omitted.
        result_identifier: Custom outcome classification. Defaults to
            the status-code based DefaultResultIdentifier.
        rate_limiter: Limiter to gate attempts with. When omitted a
            TokenBucket is built from ``config``.
    """

    def __init__(
        self,
        config: CallerConfig | None = None,
        result_identifier: ResultIdentifier | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._config = config or CallerConfig()
        self._rate_limiter = rate_limiter or TokenBucket(self._config.effective_token_bucket())
        self._gate = RateGate(self._rate_limiter)
        self._identifier = result_identifier or DefaultResultIdentifier()
        self._queue = AdmissionQueue(self._config.concurrency)
        self._engine = RetryEngine(
            self._gate,
            self._identifier,
            self._config.retry,
            DelayCalculator(self._config.retry, self._gate),
        )
        logger.debug(
            f"AsyncCaller initialized: concurrency={self._config.concurrency}, "
            f"max_retries={self._config.retry.max_retries}"
        )

    @classmethod
    def from_config_file(
        cls,
        path: Path | str,
        result_identifier: ResultIdentifier | None = None,
    ) -> AsyncCaller:
        """Build a caller from a YAML config file (defaults if missing)."""
        return cls(load_caller_config(path), result_identifier=result_identifier)

    @property
    def config(self) -> CallerConfig:
        return self._config

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def running(self) -> int:
        return self._queue.running

    @property
    def pending(self) -> int:
        return self._queue.pending

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run ``fn(*args, **kwargs)`` once a slot is free, retrying as configured.

        The slot is held across all retries and released however the
        call ends.

        Returns:
            Whatever ``fn`` resolved to.

        Raises:
            Exception: Whatever ``fn`` raised, unwrapped.
        """
        operation = partial(fn, *args, **kwargs) if args or kwargs else fn
        async with self._queue.slot():
            return await self._engine.run(operation)

    def extract_status_codes(self, value: Any) -> list[int]:
        return status.extract_status_codes(value)

    def is_client_side_error(self, value: Any) -> bool:
        return status.is_client_side_error(value)

    def is_rate_limited(self, value: Any) -> bool:
        return status.is_rate_limited(value)
