"""
Per-call retry state.

This module defines the RetryState dataclass that tracks one logical call
(the original attempt plus its retries). A state is created by the executor
for every top-level call and never shared between calls.
"""

import time
from dataclasses import dataclass, field
from typing import Callable

from ratelimit_layer.models.envelopes import RequestEnvelope


@dataclass
class RetryState:
    """
    Mutable bookkeeping for one retry chain.

    Attributes:
        request: Envelope for the current attempt (replaced on each retry)
        attempt: Number of retries performed so far (0 on the first try)
        clock: Monotonic clock returning seconds
        started_at: Clock reading when the call started
    """

    request: RequestEnvelope
    attempt: int = 0
    clock: Callable[[], float] = time.monotonic
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def elapsed_seconds(self) -> int:
        """Whole seconds elapsed since the call started (truncated)."""
        return int(self.clock() - self.started_at)

    def advance(self, request: RequestEnvelope) -> None:
        """Move to the next attempt with a freshly cloned request."""
        self.attempt += 1
        self.request = request
