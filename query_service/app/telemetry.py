"""
Service-specific telemetry for the query gateway.

Domain metrics and FastAPI instrumentation that sit on top of the shared
``gateway_common.observability`` module.
"""

import logging

from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from gateway_common.observability import (
    CounterRegistry,
    create_counter,
    create_histogram,
    MetricsMiddleware,
)

logger = logging.getLogger("telemetry")

# ── HTTP ─────────────────────────────────────────────────────────

HTTP_REQUESTS = create_counter(
    "http_requests_total",
    "Total HTTP requests by method and path",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION = create_histogram(
    "http_request_duration_seconds",
    "HTTP request latency by method and path",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    labelnames=["method", "path"],
)

# ── Storage backend ──────────────────────────────────────────────

BACKEND_QUERY_DURATION = create_histogram(
    "backend_query_duration_seconds",
    "Latency of single storage-node calls by operation",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
    labelnames=["operation"],
)

# ── Request statistics ───────────────────────────────────────────

STAT_NAMES = (
    "history_requests",
    "history_response_counters",
    "history_response_items",
    "history_one_requests",
    "info_requests",
    "info_one_requests",
    "last_requests",
    "last_request_items",
    "last_raw_requests",
    "last_raw_request_items",
    "chart_requests",
    "alive_requests",
    "query_failures",
)

QUERY_STATS = CounterRegistry("query", STAT_NAMES)


# ── Initialization ───────────────────────────────────────────────

def init(app):
    """Wire service-specific telemetry into the FastAPI app.

    * Adds the HTTP-metrics middleware.
    * Instruments FastAPI with OpenTelemetry auto-instrumentation.
    """
    app.add_middleware(
        MetricsMiddleware,
        counter=HTTP_REQUESTS,
        histogram=HTTP_REQUEST_DURATION,
        ignored_paths={"/metrics"},
    )

    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="metrics,health")
        logger.info("FastAPI instrumentation enabled")
    except Exception as e:
        logger.warning("FastAPI instrumentation failed: %s", e)

    logger.info("Service telemetry initialised")
