"""
Rate-limit aware retry engine.

This package implements the retry chain for calls against a rate-limited
remote API:

1. **Decide**: is the response retryable (429 by default)?
2. **Wait**: until the server's ``x-rate-limit-reset`` plus a skew delta
3. **Re-issue**: a cloned request annotated with retry provenance headers

Main Components:
    - RetryExecutor: Attempt loop under an overall time budget
    - RetryDecisionPolicy: Protocol for retry decisions (RateLimitRetryPolicy default)
    - clone_request / annotate_retry_headers: copy-on-retry helpers
    - CancellationToken: Cancellation signal threaded through a call

Usage:
    >>> from ratelimit_layer.retry import RetryExecutor
    >>> executor = RetryExecutor(RetryConfig(max_retries=2))
    >>> response = await executor.execute_with_retry(request, token, transport.operate)
"""

from ratelimit_layer.retry.cancellation import CancellationToken
from ratelimit_layer.retry.cloning import clone_request
from ratelimit_layer.retry.engine import RetryExecutor
from ratelimit_layer.retry.exceptions import (
    RetryArgumentError,
    RetryCancelledError,
    RetryConfigurationError,
    RetryEngineError,
)
from ratelimit_layer.retry.headers import annotate_retry_headers
from ratelimit_layer.retry.policy import RateLimitRetryPolicy, RetryDecisionPolicy
from ratelimit_layer.retry.state import RetryState

__all__ = [
    "RetryExecutor",
    "RetryDecisionPolicy",
    "RateLimitRetryPolicy",
    "RetryState",
    "CancellationToken",
    "clone_request",
    "annotate_retry_headers",
    "RetryEngineError",
    "RetryConfigurationError",
    "RetryArgumentError",
    "RetryCancelledError",
]
