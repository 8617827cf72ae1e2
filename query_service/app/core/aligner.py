"""
Merge several series into one chart-ready table on a shared time axis.

Two strategies are available:

``POSITIONAL`` (default)
    The longest series (first one on ties) provides the time axis.  Every
    series is then compared slot by slot *by index*: point ``j`` is kept if
    its timestamp equals the axis timestamp at ``j``, otherwise the slot is
    NaN.  This is not a timestamp join.  It is only correct when all series
    share one sampling interval; mixing cadences produces NaN padding.
    Chart consumers depend on this output shape, so it stays the default.

``TIMESTAMP``
    Opt-in join: the axis is the sorted union of all timestamps and every
    column is looked up by timestamp.

In both strategies columns are keyed by counter name and a later series
with the same counter replaces an earlier one.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Sequence

from .models import AlignedTable, Series

NAN = math.nan


class AlignmentStrategy(str, Enum):
    POSITIONAL = "positional"
    TIMESTAMP = "timestamp"


def reference_series(series: Sequence[Series]) -> Series | None:
    """The series with the most points; ties go to the earliest."""
    reference = None
    for s in series:
        if reference is None or len(s) > len(reference):
            reference = s
    return reference


def align_positional(series: Sequence[Series]) -> AlignedTable:
    reference = reference_series(series)
    if reference is None:
        return AlignedTable()

    axis = reference.timestamps
    columns: dict[str, list[float]] = {}
    for s in series:
        points = s.points
        column = []
        for j, ts in enumerate(axis):
            if j < len(points) and points[j].timestamp == ts:
                column.append(points[j].value)
            else:
                column.append(NAN)
        columns[s.counter] = column
    return AlignedTable(timestamps=list(axis), columns=columns)


def align_by_timestamp(series: Sequence[Series]) -> AlignedTable:
    if not series:
        return AlignedTable()

    axis = sorted({p.timestamp for s in series for p in s.points})
    columns: dict[str, list[float]] = {}
    for s in series:
        by_ts = {p.timestamp: p.value for p in s.points}
        columns[s.counter] = [by_ts.get(ts, NAN) for ts in axis]
    return AlignedTable(timestamps=axis, columns=columns)


_STRATEGIES = {
    AlignmentStrategy.POSITIONAL: align_positional,
    AlignmentStrategy.TIMESTAMP: align_by_timestamp,
}


def align_series(
    series: Sequence[Series],
    strategy: AlignmentStrategy = AlignmentStrategy.POSITIONAL,
) -> AlignedTable:
    """Align *series* into one table using *strategy*.

    An empty input yields an empty table.
    """
    return _STRATEGIES[AlignmentStrategy(strategy)](list(series))
