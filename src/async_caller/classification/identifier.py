"""Verdict dataclass and the ResultIdentifier capability.

A ResultIdentifier looks at whatever a wrapped operation resolved to
or raised and tells the retry engine whether it was rate limited and
whether retrying is pointless. Callers with protocol-specific error
shapes (gRPC status codes, SDK exception classes) subclass it and
pass an instance to AsyncCaller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from async_caller.classification.status import is_client_side_error, is_rate_limited


@dataclass(frozen=True)
class Verdict:
    """Classification of a single attempt outcome.

    ``is_rate_limited`` takes precedence over ``dont_retry``: a
    rate-limited outcome is always retried while attempts remain.
    """

    is_rate_limited: bool = False
    dont_retry: bool = False

    @property
    def is_client_side_error(self) -> bool:
        return self.dont_retry

    @property
    def is_fatal(self) -> bool:
        return self.dont_retry and not self.is_rate_limited


class ResultIdentifier(ABC):
    """Classifies resolved results and raised errors."""

    @abstractmethod
    def identify_result(self, result: Any) -> Verdict:
        """Classify a value the operation resolved to.

        Only ``is_rate_limited`` is consulted for results.
        """
        ...

    @abstractmethod
    def identify_error(self, error: BaseException) -> Verdict:
        """Classify an exception the operation raised."""
        ...


class DefaultResultIdentifier(ResultIdentifier):
    """Status-code based classification (429 = rate limited, 4xx = fatal)."""

    def _classify(self, value: Any) -> Verdict:
        return Verdict(
            is_rate_limited=is_rate_limited(value),
            dont_retry=is_client_side_error(value),
        )

    def identify_result(self, result: Any) -> Verdict:
        return self._classify(result)

    def identify_error(self, error: BaseException) -> Verdict:
        return self._classify(error)
