"""Prometheus metric definitions for the produce API."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
messages_published_total = Counter(
    "messages_published_total",
    "Messages acknowledged by the broker",
    ["service", "topic"],
)
publish_failures_total = Counter(
    "publish_failures_total",
    "Publish calls that raised",
    ["service", "topic", "error_type"],
)
publish_latency_seconds = Histogram(
    "publish_latency_seconds",
    "Seconds from publish call to broker acknowledgment",
    ["service", "topic"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
