"""AsyncCaller execution - admission queue, retry engine, and delay calculation."""

from async_caller.execution.delay import DelayCalculator, get_retry_after
from async_caller.execution.queue import AdmissionQueue
from async_caller.execution.retry import AttemptContext, RetryEngine

__all__ = [
    "AdmissionQueue",
    "AttemptContext",
    "DelayCalculator",
    "RetryEngine",
    "get_retry_after",
]
