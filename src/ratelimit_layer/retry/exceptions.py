"""
Retry engine exceptions.

Transport failures are not part of this hierarchy: the engine never
interprets or retries them, it lets them propagate unchanged (see
``ratelimit_layer.transport.exceptions``). Rate-limited responses are not
errors either; they are returned to the caller once retrying stops.
"""


class RetryEngineError(Exception):
    """
    Base exception for all retry engine errors.

    Attributes:
        message: Human-readable description
        details: Structured context for logging
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RetryConfigurationError(RetryEngineError, ValueError):
    """
    Raised when retry parameters are inconsistent.

    Detected once, when the executor is constructed, before any call is made.
    """
    pass


class RetryArgumentError(RetryEngineError, ValueError):
    """Raised when a call is made without a request or a transport operation."""
    pass


class RetryCancelledError(RetryEngineError):
    """
    Raised when the cancellation token fires while a call is suspended.

    Covers both the transport call and the backoff sleep. No response is
    returned once this is raised.
    """
    pass
