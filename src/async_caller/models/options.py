"""Configuration models for AsyncCaller.

Captures token bucket, retry and concurrency settings with the
defaults the caller falls back to when nothing is configured.
"""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

# Added to caller-supplied windows so tokens granted right at a window
# boundary do not starve the next window.
WINDOW_PADDING_MS = 10


class TimeUnit(IntEnum):
    """Millisecond multipliers for expressing windows and delays."""

    MILLISECONDS = 1
    SECONDS = 1000
    MINUTES = 60_000
    HOURS = 3_600_000
    DAYS = 86_400_000


class RetryOptions(BaseModel):
    """Retry behaviour for a single call.

    ``max_retries`` counts retries, not attempts: the default of 3
    allows up to 4 attempts in total.
    """

    model_config = {"extra": "forbid"}

    max_retries: int = Field(default=3, ge=0)
    min_delay_in_ms: float = Field(default=1000, ge=0)
    max_delay_in_ms: float = Field(default=10_000, ge=0)
    backoff_factor: float = Field(default=2, gt=0)

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> RetryOptions:
        if self.min_delay_in_ms > self.max_delay_in_ms:
            raise ValueError(
                f"min_delay_in_ms ({self.min_delay_in_ms}) must not exceed "
                f"max_delay_in_ms ({self.max_delay_in_ms})"
            )
        return self

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


class TokenBucketOptions(BaseModel):
    """Rate limit settings forwarded to the token bucket.

    ``capacity`` is the burst size, ``fill_per_window`` the number of
    tokens added every ``window_in_ms``. Without ``initial_tokens`` the
    bucket starts full; a lower value ramps traffic up gradually.
    """

    model_config = {"extra": "forbid"}

    capacity: int = Field(ge=1)
    fill_per_window: int = Field(ge=1)
    window_in_ms: float = Field(gt=0)
    initial_tokens: int | None = Field(default=None, ge=0)

    def padded(self, margin_ms: float = WINDOW_PADDING_MS) -> TokenBucketOptions:
        """Return a copy with the window widened by ``margin_ms``."""
        return self.model_copy(update={"window_in_ms": self.window_in_ms + margin_ms})


DEFAULT_TOKEN_BUCKET_OPTIONS = TokenBucketOptions(
    capacity=10,
    fill_per_window=1,
    window_in_ms=100,
)


class CallerConfig(BaseModel):
    """Top-level AsyncCaller configuration, as loaded from YAML."""

    model_config = {"extra": "forbid"}

    token_bucket: TokenBucketOptions | None = None
    retry: RetryOptions = Field(default_factory=RetryOptions)
    concurrency: int = Field(default=5, ge=1)

    def effective_token_bucket(self) -> TokenBucketOptions:
        """Token bucket options the caller actually uses.

        Caller-supplied options get the boundary padding; the built-in
        defaults are used as-is.
        """
        if self.token_bucket is None:
            return DEFAULT_TOKEN_BUCKET_OPTIONS
        return self.token_bucket.padded()


def load_caller_config(path: Path | str) -> CallerConfig:
    """Load CallerConfig from a YAML file. Returns defaults if not found.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated CallerConfig instance.
    """
    config_path = Path(path)
    if not config_path.exists():
        return CallerConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return CallerConfig()
    return CallerConfig.model_validate(raw)
