"""
Transport layer.

Provides the abstract transport capability consumed by the retry executor
and the httpx-based implementation.
"""

from ratelimit_layer.transport.base_transport import BaseTransport
from ratelimit_layer.transport.httpx_transport import HttpxTransport
from ratelimit_layer.transport.exceptions import (
    TransportError,
    TransportConnectionError,
    TransportTimeoutError,
)

__all__ = [
    "BaseTransport",
    "HttpxTransport",
    "TransportError",
    "TransportConnectionError",
    "TransportTimeoutError",
]
