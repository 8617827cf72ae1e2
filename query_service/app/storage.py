"""
Storage-tier client.

``StorageBackend`` is the contract the query core consumes.
``HttpStorageBackend`` speaks JSON over HTTP to the storage nodes:

    POST {node}/graph/query     {"start", "end", "cf", "endpoint", "counter"}
    POST {node}/graph/last      {"endpoint", "counter"}
    POST {node}/graph/last/raw  {"endpoint", "counter"}
    POST {node}/graph/info      {"endpoint", "counter"}

A series always lives on the node picked by ``crc32("endpoint/counter")``.
Node health, pooling and retries belong to the storage tier.
"""

from __future__ import annotations

import logging
import math
import time
import zlib
from typing import Protocol

import requests

from gateway_common.observability import client_span

from query_service.app.core.errors import BackendUnavailable, NoSuchSeries
from query_service.app.core.models import LastSample, SamplePoint, Series, SeriesInfo, SeriesQuery

logger = logging.getLogger("storage")


class StorageBackend(Protocol):
    def query_range(self, query: SeriesQuery) -> Series: ...

    def query_last(self, endpoint: str, counter: str) -> LastSample: ...

    def query_last_raw(self, endpoint: str, counter: str) -> LastSample: ...

    def query_info(self, endpoint: str, counter: str) -> SeriesInfo: ...


# ── Wire decoding ────────────────────────────────────────────────


def _to_float(value) -> float:
    if value is None:
        return math.nan
    return float(value)


def decode_point(raw: dict) -> SamplePoint:
    return SamplePoint(int(raw["timestamp"]), _to_float(raw.get("value")))


def decode_series(raw: dict, query: SeriesQuery) -> Series:
    points = tuple(decode_point(v) for v in raw.get("values") or [])
    return Series(
        endpoint=raw.get("endpoint") or query.endpoint,
        counter=raw.get("counter") or query.counter,
        points=points,
        dstype=raw.get("dstype") or "GAUGE",
        step=raw.get("step"),
    )


def decode_last(raw: dict, endpoint: str, counter: str) -> LastSample:
    value = raw.get("value")
    if not value:
        raise NoSuchSeries(f"no last value for {endpoint}/{counter}")
    return LastSample(
        endpoint=raw.get("endpoint") or endpoint,
        counter=raw.get("counter") or counter,
        value=decode_point(value),
    )


def decode_info(raw: dict, endpoint: str, counter: str) -> SeriesInfo:
    return SeriesInfo(
        endpoint=raw.get("endpoint") or endpoint,
        counter=raw.get("counter") or counter,
        consolidation=raw.get("consol_fun", ""),
        step=raw.get("step"),
        dstype=raw.get("dstype", ""),
        filename=raw.get("filename", ""),
        addr=raw.get("addr", ""),
    )


def _decode(decoder, raw, *args):
    """Run *decoder*, turning a malformed payload into ``BackendUnavailable``."""
    try:
        return decoder(raw, *args)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise BackendUnavailable(f"malformed storage response: {exc!r}") from exc


# ── HTTP backend ─────────────────────────────────────────────────


class HttpStorageBackend:
    """JSON-over-HTTP client for the storage nodes.

    Args:
        nodes: Base URLs of the storage nodes.
        timeout: Per-call timeout in seconds.
        session: Optional ``requests.Session`` (tests inject a mock).
        latency_histogram: Optional Prometheus histogram labelled by
            ``operation``.
    """

    def __init__(
        self,
        nodes: list[str],
        timeout: float = 5.0,
        session: requests.Session | None = None,
        latency_histogram=None,
    ):
        if not nodes:
            raise ValueError("HttpStorageBackend needs at least one node")
        self.nodes = [n.rstrip("/") for n in nodes]
        self.timeout = timeout
        self.session = session or requests.Session()
        self.latency_histogram = latency_histogram

    def node_for(self, endpoint: str, counter: str) -> str:
        checksum = zlib.crc32(f"{endpoint}/{counter}".encode("utf-8"))
        return self.nodes[checksum % len(self.nodes)]

    def query_range(self, query: SeriesQuery) -> Series:
        body = {
            "start": query.window.start,
            "end": query.window.end,
            "cf": query.consolidation,
            "endpoint": query.endpoint,
            "counter": query.counter,
        }
        raw = self._post("query_range", "/graph/query", query.endpoint, query.counter, body)
        return _decode(decode_series, raw, query)

    def query_last(self, endpoint: str, counter: str) -> LastSample:
        raw = self._post("query_last", "/graph/last", endpoint, counter,
                         {"endpoint": endpoint, "counter": counter})
        return _decode(decode_last, raw, endpoint, counter)

    def query_last_raw(self, endpoint: str, counter: str) -> LastSample:
        raw = self._post("query_last_raw", "/graph/last/raw", endpoint, counter,
                         {"endpoint": endpoint, "counter": counter})
        return _decode(decode_last, raw, endpoint, counter)

    def query_info(self, endpoint: str, counter: str) -> SeriesInfo:
        raw = self._post("query_info", "/graph/info", endpoint, counter,
                         {"endpoint": endpoint, "counter": counter})
        return _decode(decode_info, raw, endpoint, counter)

    def ping(self) -> dict[str, bool]:
        """Reachability of every node (any HTTP answer counts as reachable)."""
        status = {}
        for node in self.nodes:
            try:
                self.session.get(node, timeout=self.timeout)
                status[node] = True
            except requests.RequestException:
                status[node] = False
        return status

    def close(self) -> None:
        self.session.close()

    def _post(self, operation: str, path: str, endpoint: str, counter: str, body: dict) -> dict:
        node = self.node_for(endpoint, counter)
        start = time.perf_counter()
        with client_span(
            f"storage {operation}",
            attributes={
                "storage.node": node,
                "storage.operation": operation,
                "storage.endpoint": endpoint,
                "storage.counter": counter,
            },
            tracer_name=__name__,
        ) as span:
            try:
                response = self.session.post(f"{node}{path}", json=body, timeout=self.timeout)
            except requests.RequestException as exc:
                raise BackendUnavailable(f"{node}: {exc}") from exc
            finally:
                if self.latency_histogram is not None:
                    self.latency_histogram.labels(operation=operation).observe(
                        time.perf_counter() - start
                    )

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code == 404:
                raise NoSuchSeries(f"{endpoint}/{counter} not found on {node}")
            if response.status_code >= 500:
                raise BackendUnavailable(f"{node} answered {response.status_code}")
            if response.status_code >= 400:
                raise BackendUnavailable(f"{node} rejected {operation}: {response.status_code}")

            try:
                payload = response.json()
            except ValueError as exc:
                raise BackendUnavailable(f"{node} sent an unreadable body") from exc
            if not payload:
                raise NoSuchSeries(f"{endpoint}/{counter} empty on {node}")
            if not isinstance(payload, dict):
                raise BackendUnavailable(f"{node} sent a non-object body")

            logger.debug("%s %s/%s via %s", operation, endpoint, counter, node)
            return payload
