"""Classification-driven retry with rate gating and backoff.

Each attempt first takes a token from the rate gate, then runs the
operation. The outcome is classified: rate-limited outcomes and
unclassified errors are retried after a delay, client-side errors
are raised at once. On the last permitted attempt the outcome is
passed through untouched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from async_caller.classification.identifier import ResultIdentifier
from async_caller.execution.delay import DelayCalculator, headers_of_error, headers_of_result
from async_caller.models.options import RetryOptions
from async_caller.ratelimit.gate import RateGate

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AttemptContext:
    """Per-call retry state.

    ``attempt`` starts at 1 and never exceeds ``max_attempts``.
    """

    max_attempts: int
    attempt: int = 1

    @property
    def is_last(self) -> bool:
        return self.attempt >= self.max_attempts


class RetryEngine:
    """Drives repeated attempts of one operation until a terminal outcome."""

    def __init__(
        self,
        gate: RateGate,
        identifier: ResultIdentifier,
        options: RetryOptions,
        delay_calculator: DelayCalculator | None = None,
    ) -> None:
        self._gate = gate
        self._identifier = identifier
        self._options = options
        self._delays = delay_calculator or DelayCalculator(options, gate)

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` until it succeeds, fails terminally, or runs out of attempts.

        Returns:
            The operation's result. If every attempt was rate limited by
            its result, the last such result is returned.

        Raises:
            Exception: The operation's own exception, unchanged, when it is
                a client-side error or the final attempt raised.
        """
        ctx = AttemptContext(max_attempts=self._options.max_attempts)

        while True:
            await self._gate.acquire()

            try:
                result = await fn()
            except Exception as exc:
                if ctx.is_last:
                    logger.warning(
                        f"Max retries exceeded after {ctx.attempt} attempts. "
                        f"Last error: {type(exc).__name__}"
                    )
                    raise
                verdict = self._identifier.identify_error(exc)
                if verdict.is_fatal:
                    logger.debug(f"Not retrying {type(exc).__name__} on attempt {ctx.attempt}")
                    raise
                # rate limited or unknown: retry with delay
                delay_ms = self._delays.calculate(ctx.attempt, headers_of_error(exc))
            else:
                if ctx.is_last:
                    return result
                verdict = self._identifier.identify_result(result)
                if not verdict.is_rate_limited:
                    return result
                delay_ms = self._delays.calculate(ctx.attempt, headers_of_result(result))

            logger.debug(
                f"Attempt {ctx.attempt}/{ctx.max_attempts} will be retried in {delay_ms:.0f}ms"
            )
            await asyncio.sleep(delay_ms / 1000)
            ctx.attempt += 1
