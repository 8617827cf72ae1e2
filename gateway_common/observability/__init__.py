"""
gateway_common.observability: shared observability for gateway services.

Submodules
----------
logging      Structured JSON logging with OTel trace-context injection.
metrics      Prometheus metric factories and the statistics CounterRegistry.
tracing      OpenTelemetry tracing (OTLP over HTTP) and span helpers.
middleware   Starlette HTTP-metrics middleware.
testing      In-memory tracing exporter & metric-reset helpers for tests.

Quick start
-----------
::

    from gateway_common.observability import init_observability, get_logger

    init_observability("query-gateway", "1.0.0")
    logger = get_logger("query-gateway")
"""

import logging as _logging
import os as _os

# ── logging ──────────────────────────────────────────────────────
from .logging import setup_logging, get_logger, level_from_env, JsonTraceFormatter

# ── metrics ──────────────────────────────────────────────────────
from .metrics import (
    CounterRegistry,
    create_counter,
    create_histogram,
    create_info,
    create_gauge,
    create_service_info,
    metrics_response,
)

# ── tracing ──────────────────────────────────────────────────────
from .tracing import init_tracing, shutdown_tracing, client_span, bind_context

# ── middleware ────────────────────────────────────────────────────
from .middleware import MetricsMiddleware


# ── bootstrap ────────────────────────────────────────────────────

def init_observability(
    service_name: str,
    version: str,
    *,
    log_level: int = _logging.INFO,
    environment: str | None = None,
) -> None:
    """
    One-call bootstrap for logging, tracing, and service-info metrics.

    1. ``setup_logging(log_level, service=service_name)``
    2. ``init_tracing(service_name)``, only when
       ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set; failures are logged and
       swallowed so they never crash the service.
    3. ``create_service_info(service_name, version, environment)``

    Args:
        service_name: Identifier used in logs, traces and the info metric.
        version: Semantic version of the service.
        log_level: Root log level (default ``INFO``).
        environment: Deployment env; defaults to ``$ENVIRONMENT`` or
            ``"development"``.
    """
    setup_logging(log_level, service=service_name)
    logger = get_logger(service_name)

    if _os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT"):
        try:
            init_tracing(service_name)
        except Exception as exc:
            logger.warning("Tracing init failed (non-fatal): %s", exc)
    else:
        logger.info("Tracing disabled (OTEL_EXPORTER_OTLP_ENDPOINT not set)")

    create_service_info(
        service_name.replace("-", "_"),
        version,
        environment,
    )

    logger.info("Observability initialised for %s v%s", service_name, version)


__all__ = [
    # bootstrap
    "init_observability",
    # logging
    "setup_logging",
    "get_logger",
    "level_from_env",
    "JsonTraceFormatter",
    # metrics
    "CounterRegistry",
    "create_counter",
    "create_histogram",
    "create_info",
    "create_gauge",
    "create_service_info",
    "metrics_response",
    # tracing
    "init_tracing",
    "shutdown_tracing",
    "client_span",
    "bind_context",
    # middleware
    "MetricsMiddleware",
]
