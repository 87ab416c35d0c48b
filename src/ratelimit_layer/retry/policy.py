"""
Retry decision policies.

A policy answers two questions about a response: should it be retried,
and how long to wait first. The executor only talks to the
``RetryDecisionPolicy`` protocol, so extra transient status codes (e.g. 503)
or a different delay source can be plugged in without touching it.

The default policy follows the server's rate-limit headers:

    delay = min(x-rate-limit-reset) - Date + backoff_seconds_delta

A zero delay means "do not wait": either the headers needed to compute
the wait are missing or the wait would exceed the overall request timeout.
"""

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Optional, Protocol

import structlog

from ratelimit_layer.models.envelopes import ResponseEnvelope

logger = structlog.get_logger(__name__)

DATE_HEADER = "Date"
RATE_LIMIT_RESET_HEADER = "x-rate-limit-reset"

HTTP_TOO_MANY_REQUESTS = 429
DEFAULT_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({HTTP_TOO_MANY_REQUESTS})


class RetryDecisionPolicy(Protocol):
    """Protocol for retry decision policies."""

    def is_retryable(self, response: Optional[ResponseEnvelope]) -> bool:
        """Return True if ``response`` warrants another attempt."""
        ...

    def compute_delay(
        self,
        response: ResponseEnvelope,
        backoff_seconds_delta: int,
        request_timeout: int,
    ) -> timedelta:
        """Return the wait before the next attempt (zero or less = give up)."""
        ...


def parse_http_date(value: str) -> Optional[datetime]:
    """Parse an HTTP date header value into an aware UTC datetime, or None."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_reset_timestamps(values: Iterable[str]) -> list[datetime]:
    """Parse Unix epoch second values, skipping anything malformed."""
    timestamps = []
    for value in values:
        try:
            timestamps.append(datetime.fromtimestamp(int(value.strip()), tz=timezone.utc))
        except (ValueError, OverflowError, OSError):
            logger.debug("Ignoring malformed rate limit reset value", value=value)
    return timestamps


class RateLimitRetryPolicy:
    """
    Default policy: retry rate-limited responses after the announced reset.

    Attributes:
        retryable_status_codes: Status codes considered transient
    """

    def __init__(self, retryable_status_codes: Iterable[int] = DEFAULT_RETRYABLE_STATUS_CODES):
        self.retryable_status_codes = frozenset(retryable_status_codes)

    def is_retryable(self, response: Optional[ResponseEnvelope]) -> bool:
        return response is not None and response.status_code in self.retryable_status_codes

    def compute_delay(
        self,
        response: ResponseEnvelope,
        backoff_seconds_delta: int,
        request_timeout: int,
    ) -> timedelta:
        """
        Compute the wait before retrying from the response headers.

        Args:
            response: Rate-limited response
            backoff_seconds_delta: Seconds added to absorb clock skew
            request_timeout: Overall budget in seconds (<= 0 means none)

        Returns:
            The delay, or ``timedelta(0)`` when the headers are missing or
            malformed, or when the delay would exceed ``request_timeout``
        """
        response_date = None
        date_values = response.headers.get_list(DATE_HEADER)
        if date_values:
            response_date = parse_http_date(date_values[0])

        reset_timestamps = parse_reset_timestamps(
            response.headers.get_list(RATE_LIMIT_RESET_HEADER, split_commas=True)
        )

        if response_date is None or not reset_timestamps:
            logger.debug(
                "Rate limit headers missing, not waiting",
                has_date=response_date is not None,
                has_reset=bool(reset_timestamps),
            )
            return timedelta(0)

        # Earliest reset wins
        retry_at = min(reset_timestamps)
        delay = retry_at - response_date + timedelta(seconds=backoff_seconds_delta)

        if request_timeout > 0 and int(delay.total_seconds()) > request_timeout:
            logger.info(
                "Computed backoff exceeds request timeout, not waiting",
                backoff_seconds=delay.total_seconds(),
                request_timeout=request_timeout,
            )
            return timedelta(0)

        return delay
