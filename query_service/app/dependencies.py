"""
FastAPI dependencies.

The gateway is built lazily on first use from the process settings; tests
swap it out through ``app.dependency_overrides[get_gateway]``.
"""

import logging
import threading

from query_service.app.config import get_settings
from query_service.app.gateway import QueryGateway
from query_service.app.storage import HttpStorageBackend
from query_service.app.telemetry import BACKEND_QUERY_DURATION, QUERY_STATS

logger = logging.getLogger("dependencies")

_gateway: QueryGateway | None = None
# Sync routes run in a threadpool; only one of them may build the gateway
_gateway_lock = threading.Lock()


def build_gateway(settings=None) -> QueryGateway:
    settings = settings or get_settings()
    backend = HttpStorageBackend(
        settings.backends,
        timeout=settings.backend_timeout,
        latency_histogram=BACKEND_QUERY_DURATION,
    )
    return QueryGateway(
        backend,
        stats=QUERY_STATS,
        max_workers=settings.fanout_max_workers,
        alive_threshold=settings.alive_threshold_seconds,
    )


def get_gateway() -> QueryGateway:
    """Process-wide gateway, created on first request."""
    global _gateway
    if _gateway is None:
        with _gateway_lock:
            if _gateway is None:
                _gateway = build_gateway()
                logger.info("QueryGateway ready (%d backend node(s))", len(_gateway.backend.nodes))
    return _gateway


def close_gateway() -> None:
    global _gateway
    with _gateway_lock:
        if _gateway is not None:
            close = getattr(_gateway.backend, "close", None)
            if close is not None:
                close()
            _gateway = None
