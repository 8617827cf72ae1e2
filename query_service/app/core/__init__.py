"""
Query core: window resolution, CF validation, fan-out, alignment, liveness.

- duration.py: relative-duration tokens and explicit timestamps to windows
- consolidation.py: AVERAGE / MAX / MIN vocabulary
- fetcher.py: concurrent, failure-tolerant per-series fan-out
- aligner.py: multi-series alignment onto one time axis
- liveness.py: heartbeat freshness check
- errors.py: error taxonomy
- models.py: request-scoped value types
"""

from .aligner import AlignmentStrategy, align_series
from .consolidation import CONSOLIDATION_FUNCTIONS, DEFAULT_CF, resolve_cf, validate_cf
from .duration import explicit_window, parse_timestamp, resolve_duration
from .errors import (
    BackendError,
    BackendUnavailable,
    EmptyRequest,
    InvalidConsolidation,
    InvalidWindow,
    MissingIdentity,
    NoSuchSeries,
    QueryError,
)
from .fetcher import SeriesFetcher
from .liveness import ALIVE_COUNTER, evaluate_liveness, is_alive
from .models import (
    INVALID_WINDOW,
    AlignedTable,
    LastSample,
    LivenessRecord,
    SamplePoint,
    Series,
    SeriesInfo,
    SeriesKey,
    SeriesQuery,
    TimeWindow,
)

__all__ = [
    # alignment
    "AlignmentStrategy",
    "align_series",
    # consolidation
    "CONSOLIDATION_FUNCTIONS",
    "DEFAULT_CF",
    "resolve_cf",
    "validate_cf",
    # windows
    "explicit_window",
    "parse_timestamp",
    "resolve_duration",
    # errors
    "QueryError",
    "EmptyRequest",
    "MissingIdentity",
    "InvalidConsolidation",
    "InvalidWindow",
    "BackendError",
    "BackendUnavailable",
    "NoSuchSeries",
    # fan-out
    "SeriesFetcher",
    # liveness
    "ALIVE_COUNTER",
    "evaluate_liveness",
    "is_alive",
    # values
    "INVALID_WINDOW",
    "AlignedTable",
    "LastSample",
    "LivenessRecord",
    "SamplePoint",
    "Series",
    "SeriesInfo",
    "SeriesKey",
    "SeriesQuery",
    "TimeWindow",
]
