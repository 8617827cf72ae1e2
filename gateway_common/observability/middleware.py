"""
Reusable ASGI / Starlette middleware for HTTP request metrics.

Usage::

    from gateway_common.observability.middleware import MetricsMiddleware
    from gateway_common.observability import create_counter, create_histogram

    HTTP_REQUESTS = create_counter(
        "http_requests_total", "Total HTTP requests", ["method", "path", "status"]
    )
    HTTP_LATENCY = create_histogram(
        "http_request_duration_seconds", "Request latency", labelnames=["method", "path"]
    )

    app.add_middleware(MetricsMiddleware, counter=HTTP_REQUESTS, histogram=HTTP_LATENCY)
"""

import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class MetricsMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that counts and times every request.

    Args:
        app: The ASGI application.
        counter: A ``prometheus_client.Counter`` with labels
            ``["method", "path", "status"]``.
        histogram: Optional ``Histogram`` with labels ``["method", "path"]``
            observing the request latency in seconds.
        ignored_paths: Optional set of paths to skip
            (e.g. ``{"/metrics", "/health"}``).
    """

    def __init__(
        self,
        app,
        counter: Counter,
        histogram: Histogram | None = None,
        ignored_paths: set[str] | None = None,
    ):
        super().__init__(app)
        self.counter = counter
        self.histogram = histogram
        self.ignored_paths = ignored_paths or set()

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)

        path = request.url.path
        if path not in self.ignored_paths:
            self.counter.labels(
                method=request.method,
                path=path,
                status=response.status_code,
            ).inc()
            if self.histogram is not None:
                self.histogram.labels(method=request.method, path=path).observe(
                    time.perf_counter() - start
                )

        return response
