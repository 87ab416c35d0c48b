"""
Abstract base transport for outbound HTTP calls.

Defines the capability the retry executor consumes: a single
``operate(request, cancellation) -> response`` coroutine. This abstraction
allows swapping the HTTP stack without changing the retry engine.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope
from ratelimit_layer.retry.cancellation import CancellationToken


logger = structlog.get_logger(__name__)


class BaseTransport(ABC):
    """
    Abstract base class for transports.

    Responsibilities:
    - Send one request envelope and return its response envelope
    - Honor the cancellation token while waiting for the response
    - Translate low-level network failures into TransportError subclasses

    Does NOT handle:
    - Rate-limit retries (that's RetryExecutor's job)
    - Request construction or response body parsing
    """

    @abstractmethod
    async def operate(
        self,
        request: RequestEnvelope,
        cancellation: Optional[CancellationToken] = None,
    ) -> ResponseEnvelope:
        """
        Send ``request`` and return the response, whatever its status.

        Args:
            request: Request envelope to send
            cancellation: Token aborting the wait for the response

        Returns:
            ResponseEnvelope (HTTP error statuses are responses, not errors)

        Raises:
            TransportConnectionError: Network failure
            TransportTimeoutError: Call exceeded the transport timeout
            RetryCancelledError: Token fired while waiting
        """
        pass

    async def close(self) -> None:
        """
        Close connections and cleanup resources.

        Default implementation does nothing. Subclasses should override if
        they hold persistent connections.
        """
        logger.debug("Closing transport", transport_class=self.__class__.__name__)

    async def __aenter__(self) -> "BaseTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False
