"""
Data models for the rate-limit retry layer.

Includes:
- Envelopes (RequestEnvelope, ResponseEnvelope)
- RetryConfig (pydantic model for retry parameters)
"""

from ratelimit_layer.models.envelopes import RequestEnvelope, ResponseEnvelope
from ratelimit_layer.models.retry_config import RetryConfig

__all__ = [
    "RequestEnvelope",
    "ResponseEnvelope",
    "RetryConfig",
]
