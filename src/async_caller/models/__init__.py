"""AsyncCaller configuration models - re-exports all public model classes."""

from async_caller.models.options import (
    DEFAULT_TOKEN_BUCKET_OPTIONS,
    CallerConfig,
    RetryOptions,
    TimeUnit,
    TokenBucketOptions,
    load_caller_config,
)

__all__ = [
    "CallerConfig",
    "DEFAULT_TOKEN_BUCKET_OPTIONS",
    "RetryOptions",
    "TimeUnit",
    "TokenBucketOptions",
    "load_caller_config",
]
