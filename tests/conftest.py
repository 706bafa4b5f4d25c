"""Shared fixtures for retry and caller tests."""

from __future__ import annotations

import pytest

from async_caller.models import RetryOptions

from fakes import GrantAllLimiter


@pytest.fixture
def limiter() -> GrantAllLimiter:
    return GrantAllLimiter()


@pytest.fixture
def fast_retry() -> RetryOptions:
    """Default retry count with millisecond delays."""
    return RetryOptions(min_delay_in_ms=1, max_delay_in_ms=5)
