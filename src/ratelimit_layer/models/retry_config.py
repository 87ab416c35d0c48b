"""
Retry configuration model.

Field-level ranges are enforced by pydantic. The cross-field rule (the
backoff delta must not exceed a positive request timeout) is checked once
by ``RetryExecutor`` at construction, raising ``RetryConfigurationError``.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ratelimit_layer.config import Settings

DEFAULT_BACKOFF_SECONDS_DELTA = 1


class RetryConfig(BaseModel):
    """
    Retry parameters for one RetryExecutor.

    Attributes:
        max_retries: Upper bound on re-attempts, not counting the first try
        request_timeout: Overall budget in seconds across attempts (<= 0 = none)
        backoff_seconds_delta: Seconds added to the server-computed wait
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: int = Field(default=2, ge=0, description="Maximum number of retries after the first attempt")
    request_timeout: int = Field(
        default=0,
        description="Overall time budget in seconds across all attempts (<= 0 means no timeout)",
    )
    backoff_seconds_delta: int = Field(
        default=DEFAULT_BACKOFF_SECONDS_DELTA,
        ge=0,
        description="Seconds added to the computed wait to absorb clock skew",
    )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetryConfig":
        """
        Build a RetryConfig from application settings.

        Args:
            settings: Settings instance from ratelimit_layer.config

        Returns:
            RetryConfig with MAX_RETRIES, REQUEST_TIMEOUT, BACKOFF_SECONDS_DELTA
        """
        return cls(
            max_retries=settings.MAX_RETRIES,
            request_timeout=settings.REQUEST_TIMEOUT,
            backoff_seconds_delta=settings.BACKOFF_SECONDS_DELTA,
        )
