"""Prometheus metrics for the application."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from multiprompt import __version__

# --- Metrics ---

APP_INFO = Info("app", "multiprompt application info")
APP_INFO.info({"version": __version__, "name": "multiprompt"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

PROVIDER_CALLS = Counter(
    "provider_calls_total",
    "Settled provider calls made by the fan-out dispatcher",
    ["provider", "outcome"],
)

PROVIDER_CALL_DURATION = Histogram(
    "provider_call_duration_seconds",
    "Provider call latency in seconds",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)


def record_provider_call(provider: str, ok: bool, elapsed_ms: int) -> None:
    PROVIDER_CALLS.labels(provider=provider, outcome="ok" if ok else "error").inc()
    PROVIDER_CALL_DURATION.labels(provider=provider).observe(elapsed_ms / 1000)


# --- Middleware ---


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        # Route template is only known after routing; unmatched paths collapse into one label
        route = request.scope.get("route")
        path = getattr(route, "path", None) or "other"

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
