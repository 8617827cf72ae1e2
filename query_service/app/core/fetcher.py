"""
Failure-tolerant fan-out of per-series queries to the storage tier.

Every (endpoint, counter) query is independent, so a batch is spread over a
bounded thread pool.  Results come back in input order; a query that fails
leaves ``None`` in its slot and never cancels its siblings.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from gateway_common.observability import CounterRegistry, bind_context

from .errors import BackendError
from .models import LastSample, Series, SeriesInfo, SeriesKey, SeriesQuery

logger = logging.getLogger("fetcher")

DEFAULT_MAX_WORKERS = 8

T = TypeVar("T")
R = TypeVar("R")


class SeriesFetcher:
    """Runs batches of storage queries concurrently.

    Args:
        backend: A ``StorageBackend``.
        max_workers: Upper bound on concurrent backend calls per batch.
        stats: Optional ``CounterRegistry``; its ``query_failures`` counter
            is incremented for every absorbed failure.
    """

    def __init__(self, backend, max_workers: int = DEFAULT_MAX_WORKERS, stats: CounterRegistry | None = None):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.backend = backend
        self.max_workers = max_workers
        self.stats = stats

    # ── public batch operations ──────────────────────────────────

    def fetch_many(self, queries: Sequence[SeriesQuery]) -> list[Optional[Series]]:
        """Range-query every item; ``None`` where the backend failed."""
        return self._fan_out(
            "query_range",
            self.backend.query_range,
            queries,
            key=lambda q: q.key,
        )

    def last_many(self, keys: Sequence[SeriesKey], raw: bool = False) -> list[Optional[LastSample]]:
        """Latest sample of every series; ``raw`` skips backend-side caching."""
        fn = self.backend.query_last_raw if raw else self.backend.query_last
        return self._fan_out(
            "query_last_raw" if raw else "query_last",
            lambda k: fn(k.endpoint, k.counter),
            keys,
            key=lambda k: k,
        )

    def info_many(self, keys: Sequence[SeriesKey]) -> list[Optional[SeriesInfo]]:
        return self._fan_out(
            "query_info",
            lambda k: self.backend.query_info(k.endpoint, k.counter),
            keys,
            key=lambda k: k,
        )

    # ── internals ────────────────────────────────────────────────

    def _fan_out(
        self,
        operation: str,
        call: Callable[[T], R],
        items: Iterable[T],
        key: Callable[[T], SeriesKey],
    ) -> list[Optional[R]]:
        items = list(items)
        if not items:
            return []

        def guarded(item: T) -> Optional[R]:
            ident = key(item)
            try:
                return call(item)
            except BackendError as exc:
                logger.warning(
                    "%s failed for %s/%s: %s",
                    operation, ident.endpoint, ident.counter, exc.code,
                    extra={"endpoint": ident.endpoint, "counter": ident.counter, "error": exc.code},
                )
            except Exception:
                logger.exception(
                    "%s raised unexpectedly for %s/%s",
                    operation, ident.endpoint, ident.counter,
                    extra={"endpoint": ident.endpoint, "counter": ident.counter},
                )
            if self.stats is not None:
                self.stats.increment("query_failures")
            return None

        workers = min(self.max_workers, len(items))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as pool:
            futures = [pool.submit(bind_context(guarded), item) for item in items]
            return [f.result() for f in futures]
