"""
Custom exceptions for the transport layer.

The retry executor does not interpret these: a transport failure ends the
call immediately and reaches the caller unchanged. Only responses (including
rate-limited ones) are subject to the retry policy.
"""


class TransportError(Exception):
    """
    Base exception for all transport errors.

    All transport-specific exceptions inherit from this to allow catching
    any transport failure with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportConnectionError(TransportError):
    """
    Raised when the remote API cannot be reached.

    Includes DNS failures, refused connections, dropped connections and
    protocol errors.
    """
    pass


class TransportTimeoutError(TransportConnectionError):
    """
    Raised when a single transport call exceeds its timeout.

    Separate from generic connection errors so callers can tell a slow
    server from an unreachable one.
    """
    pass
