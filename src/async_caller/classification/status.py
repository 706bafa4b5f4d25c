"""Status code extraction and the default client-error / rate-limit checks.

Works on whatever the wrapped operation produced: SDK exceptions,
HTTP response objects, or plain dicts. Nothing here raises on
unexpected shapes; an unrecognised value simply yields no codes.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS = 429
CLIENT_ERROR_RANGE = range(400, 500)

# Candidate locations for a status code, checked in order.
STATUS_PATHS: tuple[tuple[str, ...], ...] = (
    ("status",),
    ("response", "status"),
    ("status_code",),
    ("response", "status_code"),
    ("statuscode",),
    ("response", "statuscode"),
    ("code",),
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def get_field(value: Any, name: str) -> Any:
    """Read ``name`` from a mapping key or an attribute, else None."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get(name)
    try:
        return getattr(value, name, None)
    except Exception:  # noqa: BLE001 - properties on foreign objects may raise anything
        return None


def _get_path(value: Any, path: tuple[str, ...]) -> Any:
    for name in path:
        value = get_field(value, name)
        if value is None:
            return None
    return value


def _coerce_status(candidate: Any) -> int | None:
    """Turn a numeric or numeric-string candidate into an int."""
    if isinstance(candidate, bool):
        return None
    if isinstance(candidate, int):
        return candidate
    if isinstance(candidate, float):
        return None if math.isnan(candidate) or math.isinf(candidate) else int(candidate)
    if isinstance(candidate, str):
        match = _LEADING_INT.match(candidate)
        return int(match.group(1)) if match else None
    return None


def extract_status_codes(value: Any) -> list[int]:
    """Collect every status-code-like value found on ``value``.

    Non-numeric candidates and zero are discarded.
    """
    codes = []
    for path in STATUS_PATHS:
        code = _coerce_status(_get_path(value, path))
        if code:
            codes.append(code)
    return codes


def is_client_side_error(value: Any) -> bool:
    """True if any status candidate falls in [400, 500)."""
    for code in extract_status_codes(value):
        if code in CLIENT_ERROR_RANGE:
            logger.debug(f"Client side error detected. Status code: {code}")
            return True
    return False


def is_rate_limited(value: Any) -> bool:
    """True if any status candidate is 429."""
    codes = extract_status_codes(value)
    logger.debug(f"Possible status codes: {codes}")
    if RATE_LIMITED_STATUS in codes:
        logger.debug(
            "Too many requests detected, you might want to adjust your token bucket options."
        )
        return True
    return False
