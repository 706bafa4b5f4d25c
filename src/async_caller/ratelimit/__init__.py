"""Rate limiting - the limiter capability and the gate in front of each attempt."""

from async_caller.ratelimit.gate import RateGate
from async_caller.ratelimit.token_bucket import RateLimiter, TokenBucket

__all__ = [
    "RateGate",
    "RateLimiter",
    "TokenBucket",
]
