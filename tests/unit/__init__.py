"""
Unit tests for the rate-limit retry layer.

Test individual components in isolation:
- Envelopes and retry configuration
- Retry policy (retryability, delay computation from rate-limit headers)
- Request cloning and retry header annotation
- Cancellation token
- Retry executor (attempt loop with a fake clock and sleeper)
- httpx transport (via httpx.MockTransport)
"""
