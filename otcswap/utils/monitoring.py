"""Prometheus metrics for ledger interaction."""
from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

transactions_counter = Counter(
    "otc_transactions_total",
    "State-changing ledger transactions confirmed",
    ["operation"],
)
approvals_counter = Counter(
    "otc_approvals_total", "ERC20 approvals confirmed before a ledger call"
)
submission_failures_counter = Counter(
    "otc_submission_failures_total",
    "Failed submissions by operation and failure kind",
    ["operation", "kind"],
)
event_query_histogram = Histogram(
    "otc_event_query_seconds",
    "Latency of one concurrent event-stream query round",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)
expiry_fallback_counter = Counter(
    "otc_expiry_fallbacks_total", "Expiry constant reads that fell back to defaults"
)
rate_limit_throttle_counter = Counter(
    "rate_limit_throttles_total", "Rate limiter throttles"
)


def start_metrics_server(port: int = 8000) -> None:
    """Start a Prometheus metrics HTTP server."""
    start_http_server(port)


__all__ = [
    "start_metrics_server",
    "transactions_counter",
    "approvals_counter",
    "submission_failures_counter",
    "event_query_histogram",
    "expiry_fallback_counter",
    "rate_limit_throttle_counter",
]
