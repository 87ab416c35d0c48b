"""Unit test fixtures (fakes and stubs).

Provides a controllable clock and a recording sleeper so retry timing can
be tested without waiting.
"""

import pytest

from ratelimit_layer.retry.cancellation import CancellationToken


class FakeClock:
    """Monotonic clock advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleeper:
    """Backoff sleeper recording requested delays instead of sleeping."""

    def __init__(self, clock: FakeClock | None = None):
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, seconds: float, cancellation: CancellationToken) -> None:
        cancellation.raise_if_cancelled()
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def mock_operation(make_response):
    """Scripted transport operation.

    Usage:
        operate = mock_operation([429, 429, 200])
        ...
        assert operate.calls  # list of request envelopes seen
    """
    def _create(statuses: list[int], request_ids: list[str] | None = None):
        responses = [
            make_response(status, request_id=(request_ids[i] if request_ids else f"req-{i + 1}"))
            for i, status in enumerate(statuses)
        ]

        async def operate(request, cancellation):
            operate.calls.append(request)
            return responses[min(len(operate.calls), len(responses)) - 1]

        operate.calls = []
        return operate

    return _create
