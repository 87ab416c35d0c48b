"""Custom Prometheus metrics for the rate-limit retry layer.

These metrics are registered on the default prometheus_client registry;
the embedding application decides whether and where to expose them.
Alert rules should be configured for:
- rate_limited_responses_total (sustained throttling by the remote API)
- retries_total{outcome="exhausted"} (calls giving up while still rate-limited)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

rate_limited_responses_total = Counter(
    "rate_limited_responses_total",
    "Total responses matching the retryable status set",
    ["status"],
)
"""
Retryable responses counter by status code.

Labels:
- status: HTTP status code (429 by default, plus any extra policy codes)
"""

retries_total = Counter(
    "retries_total",
    "Retry decisions by outcome",
    ["outcome"],
)
"""
Retry decisions taken by the executor on retryable responses.

Labels:
- outcome: scheduled (a retry was scheduled), exhausted (max_retries reached),
  timeout (request_timeout elapsed), no_delay (policy returned a zero delay)

Alert thresholds:
- WARN: exhausted rate > 1% of total calls
"""

backoff_seconds = Histogram(
    "backoff_seconds",
    "Backoff delay applied before a retry, in seconds",
    buckets=[1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

# === Transport Metrics ===

transport_latency_seconds = Histogram(
    "transport_latency_seconds",
    "Latency of a single transport call in seconds",
    ["method", "success"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)
"""
Single-attempt latency histogram.

Labels:
- method: HTTP method
- success: true (a response was received, any status), false (transport failure)
"""
