"""Unit tests for retry provenance headers."""

import httpx

from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope
from ratelimit_layer.retry.headers import (
    RETRY_COUNT_HEADER,
    RETRY_FOR_HEADER,
    annotate_retry_headers,
    originating_request_id,
)


def new_request(headers=None) -> RequestEnvelope:
    return RequestEnvelope(method="GET", url="https://test.example.com/", headers=headers or {})


def test_first_retry_sets_both_headers():
    request = annotate_retry_headers(new_request(), "req-1", 1)

    assert request.headers[RETRY_FOR_HEADER] == "req-1"
    assert request.headers[RETRY_COUNT_HEADER] == "1"


def test_annotate_returns_same_instance():
    request = new_request()
    assert annotate_retry_headers(request, "req-1", 1) is request


def test_retry_for_is_never_overwritten():
    request = new_request({RETRY_FOR_HEADER: "req-1", RETRY_COUNT_HEADER: "1"})

    annotate_retry_headers(request, "req-2", 2)

    assert request.headers.get_list(RETRY_FOR_HEADER) == ["req-1"]


def test_retry_count_is_replaced():
    request = new_request(
        httpx.Headers([(RETRY_COUNT_HEADER, "1"), (RETRY_COUNT_HEADER, "7")])
    )

    annotate_retry_headers(request, "req-1", 2)

    assert request.headers.get_list(RETRY_COUNT_HEADER) == ["2"]


def test_header_names_match_case_insensitively():
    request = new_request({"x-okta-retry-for": "req-1"})

    annotate_retry_headers(request, "req-9", 3)

    assert request.headers.get_list(RETRY_FOR_HEADER) == ["req-1"]


def test_unknown_request_id_only_sets_count():
    request = annotate_retry_headers(new_request(), None, 1)

    assert RETRY_FOR_HEADER not in request.headers
    assert request.headers[RETRY_COUNT_HEADER] == "1"


def test_originating_request_id_takes_first_value():
    response = ResponseEnvelope(
        status_code=429,
        headers=httpx.Headers([("X-Okta-Request-Id", "first"), ("X-Okta-Request-Id", "second")]),
    )

    assert originating_request_id(response) == "first"


def test_originating_request_id_missing():
    assert originating_request_id(ResponseEnvelope(status_code=429)) is None
