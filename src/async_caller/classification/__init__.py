"""Outcome classification - status code extraction and retry verdicts."""

from async_caller.classification.identifier import (
    DefaultResultIdentifier,
    ResultIdentifier,
    Verdict,
)
from async_caller.classification.status import (
    extract_status_codes,
    is_client_side_error,
    is_rate_limited,
)

__all__ = [
    "DefaultResultIdentifier",
    "ResultIdentifier",
    "Verdict",
    "extract_status_codes",
    "is_client_side_error",
    "is_rate_limited",
]
