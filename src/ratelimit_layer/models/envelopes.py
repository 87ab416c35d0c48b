"""
Request/response envelopes handled by the retry engine.

Envelopes carry only what the engine needs to decide and re-issue a call
(method, URL, headers, body, protocol version, request-scoped metadata).
They are independent of any transport implementation; the httpx transport
converts them to and from httpx objects at the edge.

Headers use ``httpx.Headers``: an ordered, case-insensitive multimap that
also preserves the raw byte values of every header.
"""

import io
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, BinaryIO, Optional, Union

import httpx

RequestBody = Union[bytes, bytearray, memoryview, BinaryIO, AsyncIterable[bytes]]


def _is_seekable(body: Any) -> bool:
    seekable = getattr(body, "seekable", None)
    return callable(seekable) and bool(seekable())


@dataclass
class RequestEnvelope:
    """
    Outbound request as seen by the retry engine.

    Treated as immutable once dispatched: retries always operate on a clone
    (see ``ratelimit_layer.retry.cloning``).

    Attributes:
        method: HTTP method (normalized to upper case)
        url: Target URL
        headers: Request headers, content headers included
        body: Optional body (bytes, binary file-like, or async byte iterable)
        http_version: Protocol version string, e.g. "HTTP/1.1"
        extensions: Request-scoped metadata (key -> value); the httpx transport
            forwards only the mapping under the "httpx" key
    """

    method: str
    url: httpx.URL
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Optional[RequestBody] = None
    http_version: str = "HTTP/1.1"
    extensions: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not isinstance(self.url, httpx.URL):
            self.url = httpx.URL(self.url)
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)

    async def aread(self) -> Optional[bytes]:
        """
        Return the complete body without disturbing its read position.

        Seekable bodies are read from the start and then repositioned where
        they were. One-shot bodies (non-seekable streams, async iterables)
        can only be consumed once, so they are buffered onto the envelope
        as a ``BytesIO`` and stay readable afterwards.

        Returns:
            Body bytes, or None for a body-less request

        Raises:
            TypeError: Body is of an unsupported type
        """
        body = self.body
        if body is None:
            return None

        if isinstance(body, (bytes, bytearray, memoryview)):
            return bytes(body)

        if hasattr(body, "read"):
            if _is_seekable(body):
                position = body.tell()
                body.seek(0)
                data = body.read()
                body.seek(position)
                return bytes(data)
            data = bytes(body.read())
            self.body = io.BytesIO(data)
            return data

        if hasattr(body, "__aiter__"):
            data = b"".join([chunk async for chunk in body])
            self.body = io.BytesIO(data)
            return data

        raise TypeError(f"Unsupported request body type: {type(body).__name__}")


@dataclass
class ResponseEnvelope:
    """
    Inbound response as seen by the retry engine.

    Read-only to the engine. ``stream`` belongs to the transport layer and
    its consumer; the engine never reads it.
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    stream: Optional[Any] = None
    http_version: str = "HTTP/1.1"
    extensions: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)
