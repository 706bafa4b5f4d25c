"""AsyncCaller - concurrency, rate limiting and retries for async calls."""

from async_caller.caller import AsyncCaller
from async_caller.classification import (
    DefaultResultIdentifier,
    ResultIdentifier,
    Verdict,
    extract_status_codes,
    is_client_side_error,
    is_rate_limited,
)
from async_caller.models import (
    CallerConfig,
    RetryOptions,
    TimeUnit,
    TokenBucketOptions,
    load_caller_config,
)
from async_caller.ratelimit import RateGate, RateLimiter, TokenBucket

__all__ = [
    "AsyncCaller",
    "CallerConfig",
    "DefaultResultIdentifier",
    "RateGate",
    "RateLimiter",
    "ResultIdentifier",
    "RetryOptions",
    "TimeUnit",
    "TokenBucket",
    "TokenBucketOptions",
    "Verdict",
    "extract_status_codes",
    "is_client_side_error",
    "is_rate_limited",
    "load_caller_config",
]
