"""
Retry executor for rate-limited HTTP calls.

This module implements the RetryExecutor that wraps a transport operation
with server-directed backoff. It provides a single entry point,
``execute_with_retry``, that returns the final response of a retry chain.

Attempt cycle:
    1. Attempting: call the transport with the current request
    2. Evaluating: stop if the response is not retryable, retries are
       exhausted, or the overall request timeout has elapsed
    3. Compute the delay from the rate-limit headers; stop if it is zero
    4. Retrying: sleep (cancellable), clone and annotate the request, loop

Transport failures are never retried here; they propagate unchanged.

Usage:
    executor = RetryExecutor(RetryConfig(max_retries=2, request_timeout=60))
    response = await executor.execute_with_retry(request, token, transport.operate)
"""

import time
from datetime import timedelta
from typing import Awaitable, Callable, Optional

import structlog

from ratelimit_layer.logging_config import retry_chain_context
from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope
from ratelimit_layer.models.retry_config import RetryConfig
from ratelimit_layer.monitoring.metrics import (
    backoff_seconds,
    rate_limited_responses_total,
    retries_total,
)
from ratelimit_layer.retry.cancellation import CancellationToken
from ratelimit_layer.retry.cloning import clone_request
from ratelimit_layer.retry.exceptions import RetryArgumentError, RetryConfigurationError
from ratelimit_layer.retry.headers import annotate_retry_headers, originating_request_id
from ratelimit_layer.retry.policy import RateLimitRetryPolicy, RetryDecisionPolicy
from ratelimit_layer.retry.state import RetryState

logger = structlog.get_logger(__name__)

Operation = Callable[[RequestEnvelope, CancellationToken], Awaitable[ResponseEnvelope]]
Sleeper = Callable[[float, CancellationToken], Awaitable[None]]


async def cancellable_sleep(seconds: float, cancellation: CancellationToken) -> None:
    """Default backoff sleeper: wakes early and raises if the token fires."""
    await cancellation.sleep(seconds)


class RetryExecutor:
    """
    Executes a transport operation with rate-limit aware retries.

    The executor holds no per-call state: every call gets its own
    RetryState, so one executor can serve concurrent calls.

    Attributes:
        config: Retry parameters
        policy: Decides retryability and computes delays
        clock: Monotonic clock used for the overall request timeout
        sleep: Backoff sleeper honoring the cancellation token
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        policy: Optional[RetryDecisionPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleeper = cancellable_sleep,
    ):
        """
        Initialize retry executor.

        Args:
            config: Retry parameters (defaults to RetryConfig())
            policy: Retry decision policy (defaults to RateLimitRetryPolicy())
            clock: Monotonic clock returning seconds
            sleep: Coroutine used for the backoff wait

        Raises:
            RetryConfigurationError: backoff delta exceeds a positive request timeout
        """
        config = config or RetryConfig()
        if config.request_timeout > 0 and config.backoff_seconds_delta > config.request_timeout:
            raise RetryConfigurationError(
                "The backoff delta cannot be greater than the request timeout",
                details={
                    "backoff_seconds_delta": config.backoff_seconds_delta,
                    "request_timeout": config.request_timeout,
                },
            )

        self.config = config
        self.policy = policy or RateLimitRetryPolicy()
        self.clock = clock
        self.sleep = sleep

        logger.info(
            "RetryExecutor initialized",
            max_retries=config.max_retries,
            request_timeout=config.request_timeout,
            backoff_seconds_delta=config.backoff_seconds_delta,
            policy=type(self.policy).__name__,
        )

    async def execute_with_retry(
        self,
        request: RequestEnvelope,
        cancellation: Optional[CancellationToken],
        operate: Operation,
    ) -> ResponseEnvelope:
        """
        Run ``operate`` and retry rate-limited responses.

        Args:
            request: Request for the first attempt (never mutated)
            cancellation: Token observed by the transport call and the backoff
                sleep (None means the call cannot be cancelled by token)
            operate: Transport operation ``(request, cancellation) -> response``

        Returns:
            The last response received. It may still be rate-limited when
            retrying stopped (retries exhausted, timeout, no usable delay).

        Raises:
            RetryArgumentError: request or operate is None
            RetryCancelledError: Token fired during a transport call or sleep
            Exception: Any transport failure, unchanged
        """
        if request is None:
            raise RetryArgumentError("request must not be None", details={"argument": "request"})
        if operate is None:
            raise RetryArgumentError("operate must not be None", details={"argument": "operate"})
        if cancellation is None:
            cancellation = CancellationToken()

        state = RetryState(request=request, clock=self.clock)

        with retry_chain_context(request.method, str(request.url)):
            return await self._run_chain(state, cancellation, operate)

    async def _run_chain(
        self,
        state: RetryState,
        cancellation: CancellationToken,
        operate: Operation,
    ) -> ResponseEnvelope:
        while True:
            cancellation.raise_if_cancelled()
            # The token is enforced here even if operate ignores it
            response = await cancellation.run(operate(state.request, cancellation))

            if not self.policy.is_retryable(response):
                return response

            rate_limited_responses_total.labels(status=str(response.status_code)).inc()

            if state.attempt >= self.config.max_retries:
                retries_total.labels(outcome="exhausted").inc()
                logger.warning(
                    "Retries exhausted, returning rate-limited response",
                    method=state.request.method,
                    url=str(state.request.url),
                    attempts=state.attempt + 1,
                    max_retries=self.config.max_retries,
                )
                return response

            elapsed = state.elapsed_seconds()
            if self.config.request_timeout > 0 and elapsed >= self.config.request_timeout:
                retries_total.labels(outcome="timeout").inc()
                logger.warning(
                    "Request timeout elapsed, returning rate-limited response",
                    method=state.request.method,
                    url=str(state.request.url),
                    elapsed_seconds=elapsed,
                    request_timeout=self.config.request_timeout,
                )
                return response

            delay = self.policy.compute_delay(
                response,
                self.config.backoff_seconds_delta,
                self.config.request_timeout,
            )
            if delay <= timedelta(0):
                retries_total.labels(outcome="no_delay").inc()
                logger.info(
                    "No usable backoff delay, returning rate-limited response",
                    method=state.request.method,
                    url=str(state.request.url),
                    status_code=response.status_code,
                )
                return response

            await self._backoff(state, delay, cancellation)

            request_id = originating_request_id(response)
            next_attempt = state.attempt + 1
            retry_request = await clone_request(state.request)
            annotate_retry_headers(retry_request, request_id, next_attempt)
            state.advance(retry_request)

    async def _backoff(
        self,
        state: RetryState,
        delay: timedelta,
        cancellation: CancellationToken,
    ) -> None:
        seconds = delay.total_seconds()
        retries_total.labels(outcome="scheduled").inc()
        backoff_seconds.observe(seconds)
        logger.info(
            f"Rate limited, retrying after {seconds}s",
            method=state.request.method,
            url=str(state.request.url),
            attempt=state.attempt + 1,
            max_retries=self.config.max_retries,
            backoff_seconds=seconds,
        )
        try:
            await self.sleep(seconds, cancellation)
        except Exception:
            logger.info("Backoff interrupted", attempt=state.attempt + 1)
            raise
