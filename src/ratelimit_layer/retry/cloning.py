"""
Request cloning for safe re-issue.

A request that has been sent may have had its body consumed, and its
header collection must not be shared with the next attempt. Each retry
therefore gets its own envelope: the body is buffered into memory and
every header, extension and the protocol version are copied.
"""

import io

import httpx

from ratelimit_layer.models.envelopes import RequestEnvelope


async def clone_request(request: RequestEnvelope) -> RequestEnvelope:
    """
    Produce a structurally independent copy of ``request``.

    - Body: fully buffered into a ``BytesIO`` positioned at its start. The
      original body stays readable (see ``RequestEnvelope.aread``).
    - Headers: copied from their raw byte form, so values that would not
      pass strict validation (already-encoded values) survive unchanged.
    - Extensions: copied into a new dict (values are shared).

    Args:
        request: Request to copy

    Returns:
        New RequestEnvelope
    """
    content = await request.aread()
    body = io.BytesIO(content) if content is not None else None

    return RequestEnvelope(
        method=request.method,
        url=request.url,
        headers=httpx.Headers(list(request.headers.raw)),
        body=body,
        http_version=request.http_version,
        extensions=dict(request.extensions),
    )
