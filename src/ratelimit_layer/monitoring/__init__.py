"""Monitoring and metrics instrumentation for the rate-limit retry layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from ratelimit_layer.monitoring.metrics import (
    backoff_seconds,
    rate_limited_responses_total,
    retries_total,
    transport_latency_seconds,
)

__all__ = [
    "rate_limited_responses_total",
    "retries_total",
    "backoff_seconds",
    "transport_latency_seconds",
]
