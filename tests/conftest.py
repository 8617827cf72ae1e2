import threading

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from gateway_common.observability import CounterRegistry
from query_service.app.core import (
    BackendUnavailable,
    LastSample,
    NoSuchSeries,
    SamplePoint,
    Series,
    SeriesInfo,
)
from query_service.app.telemetry import STAT_NAMES

NOW = 1_700_000_000


class FakeBackend:
    """In-memory ``StorageBackend`` with per-series failure injection."""

    def __init__(self):
        self.series: dict[tuple[str, str], list[tuple[int, float]]] = {}
        self.last: dict[tuple[str, str], tuple[int, float]] = {}
        self.unavailable: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def add_series(self, endpoint, counter, points):
        self.series[(endpoint, counter)] = list(points)

    def add_last(self, endpoint, counter, timestamp, value=1.0):
        self.last[(endpoint, counter)] = (timestamp, value)

    def fail(self, endpoint, counter):
        self.unavailable.add((endpoint, counter))

    def _check(self, operation, endpoint, counter):
        with self._lock:
            self.calls.append((operation, endpoint, counter))
        if (endpoint, counter) in self.unavailable:
            raise BackendUnavailable(f"{endpoint}/{counter} unreachable")

    def query_range(self, query):
        self._check("query_range", query.endpoint, query.counter)
        points = self.series.get((query.endpoint, query.counter))
        if points is None:
            raise NoSuchSeries(f"{query.endpoint}/{query.counter}")
        return Series(
            endpoint=query.endpoint,
            counter=query.counter,
            points=tuple(SamplePoint(ts, v) for ts, v in points),
            step=60,
        )

    def _last(self, operation, endpoint, counter):
        self._check(operation, endpoint, counter)
        sample = self.last.get((endpoint, counter))
        if sample is None:
            raise NoSuchSeries(f"{endpoint}/{counter}")
        return LastSample(endpoint, counter, SamplePoint(*sample))

    def query_last(self, endpoint, counter):
        return self._last("query_last", endpoint, counter)

    def query_last_raw(self, endpoint, counter):
        return self._last("query_last_raw", endpoint, counter)

    def query_info(self, endpoint, counter):
        self._check("query_info", endpoint, counter)
        if (endpoint, counter) not in self.series:
            raise NoSuchSeries(f"{endpoint}/{counter}")
        return SeriesInfo(
            endpoint=endpoint,
            counter=counter,
            consolidation="AVERAGE",
            step=60,
            dstype="GAUGE",
            filename=f"/data/{endpoint}/{counter}.rrd",
            addr="10.0.0.1:6070",
        )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def stats():
    """Statistics counters on an isolated Prometheus registry."""
    return CounterRegistry("query", STAT_NAMES, registry=CollectorRegistry())


@pytest.fixture
def gateway(backend, stats):
    from query_service.app.gateway import QueryGateway

    return QueryGateway(backend, stats=stats, max_workers=4, clock=lambda: NOW)


@pytest.fixture
def client(gateway):
    from query_service.app.dependencies import get_gateway
    from query_service.app.main import app

    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
