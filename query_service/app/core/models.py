"""
Request-scoped values passed between the gateway components.

All of these are plain immutable dataclasses; the pydantic schemas in
``query_service.app.models`` are only used at the HTTP boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field


# ── Time window ──────────────────────────────────────────────────


@dataclass(frozen=True)
class TimeWindow:
    """Absolute ``[start, end]`` query window in unix seconds."""

    start: int
    end: int

    @property
    def is_valid(self) -> bool:
        """``False`` for the ``{0, 0}`` sentinel or an inverted window."""
        return not (self.start == 0 and self.end == 0) and self.start <= self.end

    @property
    def span(self) -> int:
        return self.end - self.start


INVALID_WINDOW = TimeWindow(0, 0)


# ── Queries ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SeriesKey:
    """An (endpoint, counter) identity."""

    endpoint: str
    counter: str


@dataclass(frozen=True)
class SeriesQuery:
    endpoint: str
    counter: str
    window: TimeWindow
    consolidation: str

    @property
    def key(self) -> SeriesKey:
        return SeriesKey(self.endpoint, self.counter)


# ── Results ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SamplePoint:
    """One sample.  ``value`` is NaN when the slot holds no data."""

    timestamp: int
    value: float

    @property
    def is_empty(self) -> bool:
        return math.isnan(self.value)


@dataclass(frozen=True)
class Series:
    """Points of one (endpoint, counter), ascending by timestamp."""

    endpoint: str
    counter: str
    points: tuple[SamplePoint, ...] = ()
    dstype: str = "GAUGE"
    step: int | None = None

    def __len__(self) -> int:
        return len(self.points)

    @property
    def timestamps(self) -> list[int]:
        return [p.timestamp for p in self.points]

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]


@dataclass(frozen=True)
class LastSample:
    """Most recent sample of one series."""

    endpoint: str
    counter: str
    value: SamplePoint


@dataclass(frozen=True)
class SeriesInfo:
    """Storage-side metadata of one series."""

    endpoint: str
    counter: str
    consolidation: str = ""
    step: int | None = None
    dstype: str = ""
    filename: str = ""
    addr: str = ""


@dataclass
class AlignedTable:
    """Chart-ready columns sharing one timestamp axis.

    Every column holds exactly ``len(timestamps)`` values; NaN marks a slot
    the series could not fill.
    """

    timestamps: list[int] = field(default_factory=list)
    columns: dict[str, list[float]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.timestamps and not self.columns


@dataclass(frozen=True)
class LivenessRecord:
    endpoint: str
    alive: bool
