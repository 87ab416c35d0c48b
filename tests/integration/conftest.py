"""Integration test fixtures (in-process API server).

Provides a scripted stand-in for the rate-limited API served through
``httpx.MockTransport``, so the full client stack (settings, executor,
HttpxTransport) runs without network access.
"""

from email.utils import format_datetime
from typing import Optional

import httpx
import pytest

from ratelimit_layer.client import RateLimitedClient, build_default_headers
from ratelimit_layer.models.retry_config import RetryConfig
from ratelimit_layer.retry.engine import RetryExecutor
from ratelimit_layer.transport.httpx_transport import HttpxTransport


class ScriptedApi:
    """Returns scripted statuses in order and records every request received.

    Rate-limited replies carry a Date header of ``now`` and a reset
    ``reset_in`` seconds later.
    """

    def __init__(self, now, statuses: list[int], reset_in: Optional[int] = 5):
        self.now = now
        self.statuses = statuses
        self.reset_in = reset_in
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.statuses[min(len(self.requests), len(self.statuses)) - 1]
        headers = [
            ("Date", format_datetime(self.now, usegmt=True)),
            ("X-Okta-Request-Id", f"srv-{len(self.requests)}"),
        ]
        if status == 429 and self.reset_in is not None:
            headers.append(("x-rate-limit-reset", str(int(self.now.timestamp()) + self.reset_in)))
        return httpx.Response(status, headers=headers, json={"attempt": len(self.requests)})


class SleepRecorder:
    """Backoff sleeper that records delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds, cancellation) -> None:
        cancellation.raise_if_cancelled()
        self.delays.append(seconds)


@pytest.fixture
def integration_settings(test_settings):
    """Settings pointing at the in-process API."""
    test_settings.API_BASE_URL = "https://test.example.com"
    test_settings.API_TOKEN = "integration-token"
    test_settings.USER_AGENT = "ratelimit-layer-tests/1.0"
    test_settings.MAX_RETRIES = 2
    return test_settings


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def scripted_client(integration_settings, server_time, sleep_recorder):
    """Factory building a RateLimitedClient against a ScriptedApi.

    Usage:
        client, api = scripted_client([429, 200])
    """
    def _create(statuses: list[int], reset_in: Optional[int] = 5, **config_overrides):
        api = ScriptedApi(server_time, statuses, reset_in=reset_in)
        transport = HttpxTransport(
            base_url=integration_settings.API_BASE_URL,
            timeout=integration_settings.CONNECTION_TIMEOUT,
            default_headers=build_default_headers(integration_settings),
            transport=httpx.MockTransport(api),
        )
        config = RetryConfig.from_settings(integration_settings).model_copy(update=config_overrides)
        executor = RetryExecutor(config=config, sleep=sleep_recorder)
        return RateLimitedClient(settings=integration_settings, transport=transport, executor=executor), api

    return _create
