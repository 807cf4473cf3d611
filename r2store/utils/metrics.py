"""
Prometheus metrics for storage operations.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

storage_requests_total = Counter(
    'storage_requests_total',
    'Total storage operations',
    ['operation', 'status']
)

storage_request_duration_seconds = Histogram(
    'storage_request_duration_seconds',
    'Storage operation duration in seconds',
    ['operation'],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

storage_errors_total = Counter(
    'storage_errors_total',
    'Total storage errors',
    ['error_type']
)


def record_storage_request(operation: str, success: bool, duration_seconds: float):
    """Record one finished operation."""
    status = "success" if success else "failure"
    storage_requests_total.labels(operation=operation, status=status).inc()
    storage_request_duration_seconds.labels(operation=operation).observe(duration_seconds)


def record_storage_error(error_type: str):
    storage_errors_total.labels(error_type=error_type).inc()
