"""Prometheus metrics for store operations and data service calls"""

from prometheus_client import Counter, Histogram

# Store metrics
operation_counter = Counter(
    "financeflow_operation_total",
    "Finance store operations by outcome",
    ["operation", "outcome"],  # success | failure
)

# Data service metrics
data_service_latency_histogram = Histogram(
    "data_service_latency_seconds",
    "Hosted data service response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

data_service_failures_counter = Counter(
    "data_service_failures_total",
    "Failed data service calls",
    ["code"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, succeeded: bool) -> None:
    """Record store operation outcome"""
    outcome = "success" if succeeded else "failure"
    operation_counter.labels(operation=operation, outcome=outcome).inc()
