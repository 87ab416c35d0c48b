"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Optional

import httpx
import pytest

from ratelimit_layer.config import Settings
from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope

# Fixed server time used by rate-limit header factories
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        APP_NAME="Rate Limit Layer (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        API_BASE_URL="https://test.example.com",
        API_TOKEN="test-token",
        CONNECTION_TIMEOUT=5,
        MAX_RETRIES=2,
        REQUEST_TIMEOUT=0,
        BACKOFF_SECONDS_DELTA=1,
        RETRYABLE_STATUS_CODES=[429],
    )


def _rate_limit_headers(
    reset_in: Optional[int | list[int]] = 5,
    request_id: Optional[str] = "req-1",
    now: datetime = T0,
) -> list[tuple[str, str]]:
    """Build Date / x-rate-limit-reset / request id headers relative to ``now``."""
    headers = [("Date", format_datetime(now, usegmt=True))]
    if reset_in is not None:
        offsets = reset_in if isinstance(reset_in, list) else [reset_in]
        for offset in offsets:
            headers.append(
                ("x-rate-limit-reset", str(int((now + timedelta(seconds=offset)).timestamp())))
            )
    if request_id is not None:
        headers.append(("X-Okta-Request-Id", request_id))
    return headers


@pytest.fixture
def make_response():
    """Factory fixture for ResponseEnvelope.

    Usage:
        def test_something(make_response):
            response = make_response(429, reset_in=5, request_id="abc")
    """
    def _create(
        status_code: int = 429,
        reset_in: Optional[int | list[int]] = 5,
        request_id: Optional[str] = "req-1",
        headers: Optional[list[tuple[str, str]]] = None,
    ) -> ResponseEnvelope:
        if headers is None:
            headers = _rate_limit_headers(reset_in=reset_in, request_id=request_id)
        return ResponseEnvelope(status_code=status_code, headers=httpx.Headers(headers))

    return _create


@pytest.fixture
def make_request():
    """Factory fixture for RequestEnvelope with an optional body."""
    def _create(
        method: str = "POST",
        url: str = "https://test.example.com/api/v1/users",
        body=None,
        headers: Optional[dict[str, str]] = None,
    ) -> RequestEnvelope:
        return RequestEnvelope(
            method=method,
            url=httpx.URL(url),
            headers=httpx.Headers(headers or {"Content-Type": "application/json"}),
            body=body,
        )

    return _create


@pytest.fixture
def server_time() -> datetime:
    """Server clock value used in generated Date headers."""
    return T0


@pytest.fixture
def rate_limit_headers():
    """Header list factory: ``rate_limit_headers(reset_in=5, request_id="abc")``."""
    return _rate_limit_headers
