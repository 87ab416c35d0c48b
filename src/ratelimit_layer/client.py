"""
Composition root for calls against the rate-limited API.

Wires settings into a RetryExecutor and an HttpxTransport and exposes a
small ``send`` surface. Resource-specific clients build on top of this.
"""

from typing import Optional

import httpx
import structlog

from ratelimit_layer.config import Settings, settings as default_settings
from ratelimit_layer.logging_config import configure_logging_from_settings
from ratelimit_layer.models.envelopes import RequestBody, RequestEnvelope, ResponseEnvelope
from ratelimit_layer.models.retry_config import RetryConfig
from ratelimit_layer.retry.cancellation import CancellationToken
from ratelimit_layer.retry.engine import RetryExecutor
from ratelimit_layer.retry.policy import RateLimitRetryPolicy
from ratelimit_layer.transport.base_transport import BaseTransport
from ratelimit_layer.transport.httpx_transport import HttpxTransport

logger = structlog.get_logger(__name__)


def build_default_headers(settings: Settings) -> dict[str, str]:
    """Headers sent with every request: accept, user agent, API token."""
    headers = {
        "Accept": "application/json",
        "User-Agent": settings.USER_AGENT,
    }
    if settings.API_TOKEN:
        headers["Authorization"] = f"SSWS {settings.API_TOKEN}"
    return headers


def build_transport(settings: Settings) -> HttpxTransport:
    return HttpxTransport(
        base_url=settings.API_BASE_URL,
        timeout=settings.CONNECTION_TIMEOUT,
        connection_limits=httpx.Limits(
            max_keepalive_connections=settings.MAX_KEEPALIVE_CONNECTIONS,
            max_connections=settings.MAX_CONNECTIONS,
            keepalive_expiry=settings.KEEPALIVE_EXPIRY,
        ),
        default_headers=build_default_headers(settings),
    )


def build_executor(settings: Settings) -> RetryExecutor:
    return RetryExecutor(
        config=RetryConfig.from_settings(settings),
        policy=RateLimitRetryPolicy(settings.RETRYABLE_STATUS_CODES),
    )


class RateLimitedClient:
    """
    Sends requests through the retry executor.

    Usage:
        async with RateLimitedClient.from_settings() as client:
            request = client.build_request("GET", "/api/v1/users")
            response = await client.send(request)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[BaseTransport] = None,
        executor: Optional[RetryExecutor] = None,
    ):
        """
        Initialize client.

        Args:
            settings: Application settings (defaults to the global instance)
            transport: Transport override (defaults to HttpxTransport from settings)
            executor: Executor override (defaults to one built from settings)
        """
        self.settings = settings or default_settings
        self.transport = transport or build_transport(self.settings)
        self.executor = executor or build_executor(self.settings)

        logger.info(
            "RateLimitedClient initialized",
            base_url=self.settings.API_BASE_URL,
            transport=repr(self.transport),
            max_retries=self.executor.config.max_retries,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RateLimitedClient":
        """
        Application entry point: configure logging from ``settings``
        (LOG_LEVEL, ENVIRONMENT, APP_NAME), then build the client.

        Usage:
            async with RateLimitedClient.from_settings() as client:
                response = await client.send(client.build_request("GET", "/api/v1/users"))
        """
        settings = settings or default_settings
        configure_logging_from_settings(settings)
        return cls(settings=settings)

    def build_request(
        self,
        method: str,
        path: str,
        headers: Optional[dict[str, str]] = None,
        content: Optional[RequestBody] = None,
    ) -> RequestEnvelope:
        """Build a request envelope for ``path`` relative to API_BASE_URL."""
        url = httpx.URL(self.settings.API_BASE_URL).join(path)
        return RequestEnvelope(
            method=method,
            url=url,
            headers=httpx.Headers(headers or {}),
            body=content,
        )

    async def send(
        self,
        request: RequestEnvelope,
        cancellation: Optional[CancellationToken] = None,
    ) -> ResponseEnvelope:
        """
        Send ``request`` with rate-limit retries.

        Raises:
            RetryCancelledError: Cancellation requested while waiting
            TransportError: Network failure on any attempt
        """
        return await self.executor.execute_with_retry(request, cancellation, self.transport.operate)

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False
