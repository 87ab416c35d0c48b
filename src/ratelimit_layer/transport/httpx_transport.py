"""
httpx transport implementation.

Sends request envelopes with a persistent httpx AsyncClient. Supports:
- Connection pooling via a lazily created AsyncClient
- Default headers (authorization, user agent) merged under request headers
- Cancellation of an in-flight call via CancellationToken
- Translation of httpx network failures into TransportError subclasses
"""

import time
from typing import Any, Optional

import httpx
import structlog

from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope
from ratelimit_layer.monitoring.metrics import transport_latency_seconds
from ratelimit_layer.retry.cancellation import CancellationToken
from ratelimit_layer.transport.base_transport import BaseTransport
from ratelimit_layer.transport.exceptions import (
    TransportConnectionError,
    TransportTimeoutError,
)


logger = structlog.get_logger(__name__)

# Envelope extensions key holding options meant for httpx itself
HTTPX_EXTENSIONS_KEY = "httpx"


def transport_extensions(envelope_extensions: dict[str, Any]) -> tuple[dict[str, Any], Any]:
    """
    Split httpx options out of request-scoped envelope metadata.

    Only the mapping stored under ``extensions["httpx"]`` reaches httpx;
    other keys stay on the envelope, so caller metadata such as ``trace`` or
    ``timeout`` never collides with httpcore's reserved extension names.
    A ``timeout`` inside that mapping becomes the per-request httpx timeout.

    Returns:
        (extensions for httpx, timeout or httpx.USE_CLIENT_DEFAULT)
    """
    options = dict(envelope_extensions.get(HTTPX_EXTENSIONS_KEY) or {})
    timeout = options.pop("timeout", httpx.USE_CLIENT_DEFAULT)
    return options, timeout


class HttpxTransport(BaseTransport):
    """
    Transport using httpx for async HTTP communication.

    HTTP error statuses (4xx, 5xx) are returned as responses so the retry
    policy can inspect them. The response body is read in full and handed
    over as ``ResponseEnvelope.stream`` (an ``httpx.ByteStream``).
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30,
        connection_limits: Optional[httpx.Limits] = None,
        default_headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize httpx transport.

        Args:
            base_url: Base URL relative request URLs are resolved against
            timeout: Per-call timeout in seconds
            connection_limits: httpx connection pool limits (default: 10 max connections)
            default_headers: Headers sent with every request unless overridden
            transport: Optional lower-level httpx transport (e.g. httpx.MockTransport)
        """
        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.default_headers = dict(default_headers or {})
        self._connection_limits = connection_limits
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "httpx transport initialized",
            base_url=self.base_url,
            timeout=timeout,
            connection_limits=str(connection_limits)
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                headers=self.default_headers,
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def operate(
        self,
        request: RequestEnvelope,
        cancellation: Optional[CancellationToken] = None,
    ) -> ResponseEnvelope:
        cancellation = cancellation or CancellationToken()
        content = await request.aread()
        client = await self._get_client()

        extensions, timeout = transport_extensions(request.extensions)
        http_request = client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=content,
            timeout=timeout,
            extensions=extensions,
        )

        logger.debug(
            "Sending request",
            method=http_request.method,
            url=str(http_request.url),
            body_length=len(content) if content is not None else 0,
        )

        start_time = time.monotonic()
        try:
            response = await cancellation.run(client.send(http_request))
        except httpx.TimeoutException as e:
            transport_latency_seconds.labels(method=request.method, success="false").observe(
                time.monotonic() - start_time
            )
            logger.warning(
                "Request timeout",
                method=request.method,
                url=str(http_request.url),
                timeout=self.timeout,
                error=str(e)
            )
            raise TransportTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"url": str(http_request.url), "timeout": self.timeout}
            ) from e
        except httpx.TransportError as e:
            transport_latency_seconds.labels(method=request.method, success="false").observe(
                time.monotonic() - start_time
            )
            logger.warning(
                "Network error",
                method=request.method,
                url=str(http_request.url),
                error=str(e)
            )
            raise TransportConnectionError(
                f"Network error: {str(e)}",
                details={"url": str(http_request.url), "error_type": type(e).__name__}
            ) from e

        latency = time.monotonic() - start_time
        transport_latency_seconds.labels(method=request.method, success="true").observe(latency)

        logger.debug(
            "Received response",
            method=request.method,
            url=str(http_request.url),
            status_code=response.status_code,
            latency_ms=int(latency * 1000),
        )

        return ResponseEnvelope(
            status_code=response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(response.content),
            http_version=response.http_version,
            extensions={"reason_phrase": response.reason_phrase},
        )

    async def close(self) -> None:
        """Close the underlying AsyncClient."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")
        self._client = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
