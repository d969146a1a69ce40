"""Prometheus metrics for generation and store observability.

Counters and histograms around mock generation, store writes and reads.
Exposed via /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, make_asgi_app

# Generation counters
mock_samples_generated_total = Counter(
    "mock_samples_generated_total",
    "Total mock samples handed to the store",
    ["metric"],
)

store_writes_total = Counter(
    "store_writes_total",
    "Total batch writes to the health store",
    ["status"],  # status: success, failure, rejected
)

# API counters
api_requests_total = Counter(
    "api_requests_total",
    "Total API requests",
    ["endpoint", "method", "status_code"],
)

# Histograms
mock_generation_duration_seconds = Histogram(
    "mock_generation_duration_seconds",
    "Duration of mock generation plus the store write",
)

readings_refresh_duration_seconds = Histogram(
    "readings_refresh_duration_seconds",
    "Duration of reading every metric back for one day",
)

api_response_duration_seconds = Histogram(
    "api_response_duration_seconds",
    "Duration of API responses",
    ["endpoint"],
)


def create_metrics_app():
    """Create ASGI app for /metrics endpoint."""
    return make_asgi_app()
