"""
Request orchestration: one method per gateway operation.

Each method validates the request (raising a ``QueryError`` before any
backend call), builds the per-series queries, hands them to the
``SeriesFetcher`` and post-processes the results.  Batch operations drop
absent slots; single-item operations surface the backend error.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from gateway_common.observability import CounterRegistry

from query_service.app.core import (
    ALIVE_COUNTER,
    AlignedTable,
    AlignmentStrategy,
    EmptyRequest,
    InvalidWindow,
    LastSample,
    LivenessRecord,
    MissingIdentity,
    Series,
    SeriesFetcher,
    SeriesInfo,
    SeriesKey,
    SeriesQuery,
    TimeWindow,
    align_series,
    evaluate_liveness,
    explicit_window,
    resolve_cf,
    resolve_duration,
)
from query_service.app.core.liveness import DEFAULT_ALIVE_THRESHOLD_SECONDS

logger = logging.getLogger("gateway")


def _require_pairs(pairs: Sequence) -> None:
    if not pairs:
        raise EmptyRequest()


def _require_identity(endpoint: str | None, counter: str | None) -> None:
    if not endpoint or not counter:
        raise MissingIdentity()


class QueryGateway:
    """Validates, fans out and shapes gateway queries.

    Args:
        backend: The ``StorageBackend`` to query.
        stats: ``CounterRegistry`` holding the request statistics.
        max_workers: Fan-out concurrency bound.
        alive_threshold: Heartbeat freshness threshold in seconds.
        clock: Returns the current unix time; injectable for tests.
    """

    def __init__(
        self,
        backend,
        stats: CounterRegistry,
        max_workers: int = 8,
        alive_threshold: int = DEFAULT_ALIVE_THRESHOLD_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend
        self.stats = stats
        self.fetcher = SeriesFetcher(backend, max_workers=max_workers, stats=stats)
        self.alive_threshold = alive_threshold
        self.clock = clock

    def _now(self) -> int:
        return int(self.clock())

    # ── history ──────────────────────────────────────────────────

    def history(self, start: int, end: int, cf: str | None, pairs: Sequence[SeriesKey]) -> list[Series]:
        """Range-query every pair over ``[start, end]``; failed pairs are dropped."""
        self.stats.increment("history_requests")
        _require_pairs(pairs)
        cf = resolve_cf(cf)

        window = TimeWindow(int(start), int(end))
        if window.start > window.end:
            raise InvalidWindow(f"start {window.start} is after end {window.end}")
        queries = [SeriesQuery(p.endpoint, p.counter, window, cf) for p in pairs]
        series = [s for s in self.fetcher.fetch_many(queries) if s is not None]

        self.stats.increment_by("history_response_counters", len(series))
        self.stats.increment_by("history_response_items", sum(len(s) for s in series))
        if len(series) < len(queries):
            logger.info("history: %d of %d series unavailable", len(queries) - len(series), len(queries))
        return series

    def history_one(
        self,
        endpoint: str | None,
        counter: str | None,
        start: str | int | None = None,
        end: str | int | None = None,
        cf: str | None = None,
    ) -> Series:
        """Range-query a single series.  Missing start/end mean the last hour."""
        self.stats.increment("history_one_requests")
        _require_identity(endpoint, counter)
        cf = resolve_cf(cf)

        window = explicit_window(start, end, now=self._now())
        return self.backend.query_range(SeriesQuery(endpoint, counter, window, cf))

    # ── info ─────────────────────────────────────────────────────

    def info(self, pairs: Sequence[SeriesKey]) -> list[SeriesInfo]:
        self.stats.increment("info_requests")
        _require_pairs(pairs)
        return [i for i in self.fetcher.info_many(pairs) if i is not None]

    def info_one(self, endpoint: str | None, counter: str | None) -> SeriesInfo:
        self.stats.increment("info_one_requests")
        _require_identity(endpoint, counter)
        return self.backend.query_info(endpoint, counter)

    # ── last ─────────────────────────────────────────────────────

    def last(self, pairs: Sequence[SeriesKey], raw: bool = False) -> list[LastSample]:
        """Latest sample of every pair; failed pairs are dropped."""
        prefix = "last_raw" if raw else "last"
        self.stats.increment(f"{prefix}_requests")
        _require_pairs(pairs)

        samples = [s for s in self.fetcher.last_many(pairs, raw=raw) if s is not None]
        self.stats.increment_by(f"{prefix}_request_items", len(samples))
        return samples

    # ── chart ────────────────────────────────────────────────────

    def chart(
        self,
        endpoint: str | None,
        counters: Sequence[str],
        duration: str | None,
        cf: str | None = None,
        strategy: AlignmentStrategy = AlignmentStrategy.POSITIONAL,
    ) -> AlignedTable:
        """Counters of one endpoint over a relative duration, aligned for charting."""
        self.stats.increment("chart_requests")
        counters = [c for c in counters or [] if c]
        if not endpoint or not counters:
            raise MissingIdentity()
        cf = resolve_cf(cf)

        window = resolve_duration(duration, now=self._now())
        if not window.is_valid:
            raise InvalidWindow(f"cannot resolve duration {duration!r}")

        queries = [SeriesQuery(endpoint, c, window, cf) for c in counters]
        series = [s for s in self.fetcher.fetch_many(queries) if s is not None]
        return align_series(series, strategy)

    # ── liveness ─────────────────────────────────────────────────

    def alive(self, endpoints: Sequence[str]) -> list[LivenessRecord]:
        """Heartbeat-based liveness for every endpoint, in request order."""
        self.stats.increment("alive_requests")
        _require_pairs(endpoints)

        keys = [SeriesKey(e, ALIVE_COUNTER) for e in endpoints]
        samples: list[Optional[LastSample]] = self.fetcher.last_many(keys)
        return evaluate_liveness(
            list(endpoints), samples, now=self._now(), threshold_seconds=self.alive_threshold
        )

    # ── statistics ───────────────────────────────────────────────

    def counters(self) -> list[dict]:
        return self.stats.snapshot()
