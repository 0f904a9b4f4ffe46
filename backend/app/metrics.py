"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from functools import lru_cache

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .config import APP_VERSION, SERVICE_NAME

# ==============================================================================
# APPLICATION INFO
# ==============================================================================

app_info = Info("venue_booking_payments", "Venue booking payments API information")
app_info.info({"version": APP_VERSION, "service": SERVICE_NAME})

# ==============================================================================
# HTTP METRICS
# ==============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"],
)

# ==============================================================================
# PAYMENT METRICS
# ==============================================================================

payments_initialized_total = Counter(
    "payments_initialized_total",
    "Payments successfully initialized with a processor",
    ["processor", "currency"],
)

payment_errors_total = Counter(
    "payment_errors_total",
    "Payment requests rejected, by error type",
    ["error"],
)

webhook_events_total = Counter(
    "webhook_events_total",
    "Processor webhooks received, by outcome",
    ["processor", "outcome"],
)

processor_cache_size = Gauge(
    "payment_processor_cache_size",
    "Payment processor instances currently cached by the factory",
)

provider_request_duration_seconds = Histogram(
    "payment_provider_request_duration_seconds",
    "Outbound payment provider call duration in seconds",
    ["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


@lru_cache(maxsize=2048)
def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path to reduce cardinality.

    Examples:
        /v1/payments/paystack/verify/ref_123 -> /v1/payments/paystack/verify/{id}
    """
    if "/verify/" in path:
        prefix, _, _ = path.partition("/verify/")
        return f"{prefix}/verify/{{id}}"
    path = re.sub(r"/\d+", "/{id}", path)
    path = re.sub(r"/[a-zA-Z0-9_-]{20,}", "/{id}", path)
    return path


# ==============================================================================
# PROMETHEUS MIDDLEWARE
# ==============================================================================


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = normalize_endpoint(request.url.path)
        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
            http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()


# ==============================================================================
# METRICS ENDPOINT
# ==============================================================================


def get_metrics() -> Response:
    """Generate Prometheus metrics response."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "PrometheusMiddleware",
    "get_metrics",
    "http_requests_total",
    "http_request_duration_seconds",
    "normalize_endpoint",
    "payment_errors_total",
    "payments_initialized_total",
    "processor_cache_size",
    "provider_request_duration_seconds",
    "webhook_events_total",
]
