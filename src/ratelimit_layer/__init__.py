"""
Rate-limit retry layer for outbound HTTP calls.

Wraps calls against a rate-limited remote API with a retry engine that:
- Decides per response whether a retry is warranted (429 by default)
- Waits until the server-announced rate-limit reset (plus a clock-skew delta)
- Re-issues a cloned copy of the request with retry provenance headers
- Enforces an overall time budget across attempts

Architecture: RetryExecutor + pluggable RetryDecisionPolicy + httpx transport
"""

__version__ = "0.1.0"
