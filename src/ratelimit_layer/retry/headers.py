"""
Retry provenance headers.

Every retried request carries two tracing headers:

- ``X-Okta-Retry-For``: the server-assigned request id of the first failed
  attempt. Set once per retry chain and never overwritten.
- ``X-Okta-Retry-Count``: the current attempt number. Replaced on every retry.
"""

from typing import Optional

from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope

REQUEST_ID_HEADER = "X-Okta-Request-Id"
RETRY_FOR_HEADER = "X-Okta-Retry-For"
RETRY_COUNT_HEADER = "X-Okta-Retry-Count"


def originating_request_id(response: ResponseEnvelope) -> Optional[str]:
    """Return the first request id the server assigned to ``response``."""
    values = response.headers.get_list(REQUEST_ID_HEADER)
    return values[0] if values else None


def annotate_retry_headers(
    request: RequestEnvelope,
    originating_request_id: Optional[str],
    attempt: int,
) -> RequestEnvelope:
    """
    Stamp retry provenance onto a cloned request.

    Mutates and returns ``request``; only ever call this on a clone that has
    not been dispatched yet.

    Args:
        request: Cloned request for the next attempt
        originating_request_id: Request id of the failed attempt (may be None)
        attempt: Retry number (1 for the first retry)

    Returns:
        The same request instance
    """
    if RETRY_FOR_HEADER not in request.headers and originating_request_id:
        request.headers[RETRY_FOR_HEADER] = originating_request_id

    if RETRY_COUNT_HEADER in request.headers:
        del request.headers[RETRY_COUNT_HEADER]
    request.headers[RETRY_COUNT_HEADER] = str(attempt)

    return request
