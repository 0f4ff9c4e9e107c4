"""Prometheus metrics for relay throughput, chain confirmations and metadata store health"""

from prometheus_client import Counter, Histogram

# Relay metrics
relay_operation_counter = Counter(
    "credit_relay_operations_total",
    "Relay operations handled",
    ["operation", "outcome"],  # outcome: success | <exception class name>
)

# Chain metrics
chain_confirmation_histogram = Histogram(
    "chain_confirmation_seconds",
    "Time from transaction submission to receipt",
    ["function"],
    buckets=[1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0],
)

chain_timeout_counter = Counter(
    "chain_timeouts_total",
    "Write calls not confirmed within the bound",
    ["function"],
)

# Metadata store metrics
blob_store_failures_counter = Counter(
    "blob_store_failures_total",
    "Failed metadata store calls",
    ["operation"],  # put | get
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_relay_operation(operation: str, error: Exception | None = None) -> None:
    """Count a relay operation by its outcome"""
    outcome = "success" if error is None else type(error).__name__
    relay_operation_counter.labels(operation=operation, outcome=outcome).inc()
