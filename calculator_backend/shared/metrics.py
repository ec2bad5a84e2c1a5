"""
Prometheus metrics for the calculator backend.

A dedicated registry keeps the exposition limited to this service's
metrics plus the process/platform/GC collectors, and lets the module be
re-imported by tests without duplicate-registration errors on the global
default registry.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

REGISTRY = CollectorRegistry()
ProcessCollector(registry=REGISTRY)
PlatformCollector(registry=REGISTRY)
GCCollector(registry=REGISTRY)

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "route", "status_code"],
    buckets=(0.1, 0.5, 1, 2, 5),
    registry=REGISTRY,
)


def record_request(method: str, route: str, status_code: int) -> None:
    HTTP_REQUESTS_TOTAL.labels(method=method, route=route, status_code=str(status_code)).inc()


def observe_duration(method: str, route: str, status_code: int, seconds: float) -> None:
    HTTP_REQUEST_DURATION.labels(
        method=method, route=route, status_code=str(status_code)
    ).observe(seconds)


def render() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
