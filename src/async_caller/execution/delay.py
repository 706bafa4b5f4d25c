"""Retry delay calculation: server Retry-After hint or exponential backoff."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from async_caller.classification.status import get_field
from async_caller.models.options import RetryOptions, TimeUnit
from async_caller.ratelimit.gate import RateGate

logger = logging.getLogger(__name__)

RETRY_AFTER_HEADER = "Retry-After"

_INTEGER_SECONDS = re.compile(r"[+-]?\d+", re.ASCII)


def get_retry_after(headers: Any) -> str | None:
    """Read the Retry-After value from a headers-like object.

    Accepts anything with a ``get`` method (httpx/requests headers are
    case-insensitive already) and falls back to a case-insensitive scan
    for plain mappings.
    """
    if headers is None:
        return None
    value = None
    getter = getattr(headers, "get", None)
    if callable(getter):
        try:
            value = getter(RETRY_AFTER_HEADER)
        except Exception:  # noqa: BLE001 - foreign header containers
            value = None
    if value is None and isinstance(headers, Mapping):
        wanted = RETRY_AFTER_HEADER.lower()
        for key, candidate in headers.items():
            if isinstance(key, str) and key.lower() == wanted:
                value = candidate
                break
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("latin-1")
    return str(value).strip() or None


def headers_of_result(result: Any) -> Any:
    return get_field(result, "headers")


def headers_of_error(error: BaseException) -> Any:
    headers = get_field(error, "headers")
    if headers is None:
        headers = get_field(get_field(error, "response"), "headers")
    return headers


def _parse_retry_date(value: str) -> datetime | None:
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        try:
            when = datetime.fromisoformat(value)
        except ValueError:
            return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


class DelayCalculator:
    """Computes how long to wait before the next attempt.

    A Retry-After hint wins over the backoff formula. When one is
    honoured the gate is also held for the full hinted duration, so the
    limiter cannot hand out tokens before the server allows it.
    """

    def __init__(self, options: RetryOptions, gate: RateGate | None = None) -> None:
        self._options = options
        self._gate = gate

    def default_delay(self, completed_attempts: int) -> float:
        """Exponential backoff in milliseconds, capped at max_delay_in_ms."""
        exponent = max(completed_attempts - 1, 0)
        try:
            delay = self._options.min_delay_in_ms * self._options.backoff_factor**exponent
        except OverflowError:
            delay = self._options.max_delay_in_ms
        return max(0.0, min(delay, self._options.max_delay_in_ms))

    def hinted_delay(self, retry_after: str) -> float | None:
        """Milliseconds requested by a Retry-After value, or None if unparseable."""
        # Whole-string integers only: "1.5" or "120 seconds" are not read
        # as a seconds prefix and fall back to backoff.
        if _INTEGER_SECONDS.fullmatch(retry_after):
            try:
                return max(0.0, float(int(retry_after) * TimeUnit.SECONDS))
            except (ValueError, OverflowError):
                return None
        when = _parse_retry_date(retry_after)
        if when is None:
            return None
        try:
            remaining = (when - datetime.now(timezone.utc)).total_seconds() * TimeUnit.SECONDS
        except OverflowError:
            return None
        return max(0.0, remaining)

    def calculate(self, completed_attempts: int, headers: Any = None) -> float:
        """Delay in milliseconds before attempt ``completed_attempts + 1``."""
        retry_after = get_retry_after(headers)
        if retry_after is not None:
            hinted = self.hinted_delay(retry_after)
            if hinted is not None:
                logger.debug(f"Retry-After header found. Delay: {hinted:.0f}ms")
                if self._gate is not None:
                    self._gate.hold_off(hinted)
                return min(hinted, self._options.max_delay_in_ms)
            logger.debug(f"Unparseable Retry-After header {retry_after!r}, using backoff")
        return self.default_delay(completed_attempts)
