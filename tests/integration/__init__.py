"""
Integration tests for the rate-limit retry layer.

Run the full client stack (settings, executor, httpx transport) against an
in-process API served by httpx.MockTransport.
"""
