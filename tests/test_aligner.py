import math

import pytest

from query_service.app.core.aligner import (
    AlignmentStrategy,
    align_series,
    reference_series,
)
from query_service.app.core.models import SamplePoint, Series


def _series(counter, points, endpoint="h1"):
    return Series(endpoint, counter, tuple(SamplePoint(ts, v) for ts, v in points))


def _same(column, expected):
    """Element-wise equality treating NaN == NaN."""
    assert len(column) == len(expected)
    for got, want in zip(column, expected):
        if isinstance(want, float) and math.isnan(want):
            assert math.isnan(got)
        else:
            assert got == want


NAN = math.nan


# ── Positional (default) ──────────────────────────────────────────

class TestPositionalAlignment:
    def test_single_series_is_reproduced_verbatim(self):
        s = _series("cpu.load", [(60, 0.5), (120, 0.7), (180, 0.9)])
        table = align_series([s])
        assert table.timestamps == [60, 120, 180]
        assert table.columns == {"cpu.load": [0.5, 0.7, 0.9]}

    def test_gap_filling_is_positional(self):
        ref = _series("a", [(1, 10), (2, 20), (3, 30)])
        short = _series("b", [(1, 1), (3, 3)])
        table = align_series([ref, short])

        assert table.timestamps == [1, 2, 3]
        assert table.columns["a"] == [10, 20, 30]
        # index 1: expected ts 2, got 3 -> NaN; index 2: no point -> NaN
        _same(table.columns["b"], [1, NAN, NAN])

    def test_every_column_matches_axis_length(self):
        table = align_series([
            _series("a", [(1, 1)]),
            _series("b", [(1, 1), (2, 2), (3, 3), (4, 4)]),
            _series("c", []),
        ])
        assert len(table.timestamps) == 4
        assert all(len(col) == 4 for col in table.columns.values())
        _same(table.columns["c"], [NAN] * 4)

    def test_reference_is_longest_series(self):
        a = _series("a", [(10, 1), (20, 2)])
        b = _series("b", [(11, 1), (21, 2), (31, 3)])
        table = align_series([a, b])
        assert table.timestamps == [11, 21, 31]
        _same(table.columns["a"], [NAN, NAN, NAN])

    def test_tie_goes_to_first_series(self):
        a = _series("a", [(10, 1), (20, 2)])
        b = _series("b", [(15, 1), (25, 2)])
        assert reference_series([a, b]) is a
        assert align_series([a, b]).timestamps == [10, 20]

    def test_nan_values_pass_through(self):
        s = _series("a", [(1, NAN), (2, 5.0)])
        _same(align_series([s]).columns["a"], [NAN, 5.0])

    def test_duplicate_counter_last_write_wins(self):
        first = _series("cpu.load", [(1, 1), (2, 2)], endpoint="h1")
        second = _series("cpu.load", [(1, 9), (2, 8)], endpoint="h2")
        table = align_series([first, second])
        assert table.columns == {"cpu.load": [9, 8]}

    def test_empty_input_yields_empty_table(self):
        table = align_series([])
        assert table.timestamps == []
        assert table.columns == {}
        assert table.is_empty

    def test_all_series_empty(self):
        table = align_series([_series("a", []), _series("b", [])])
        assert table.timestamps == []
        assert table.columns == {"a": [], "b": []}


# ── Timestamp join (opt-in) ───────────────────────────────────────

class TestTimestampAlignment:
    def test_joins_on_timestamp(self):
        ref = _series("a", [(1, 10), (2, 20), (3, 30)])
        short = _series("b", [(1, 1), (3, 3)])
        table = align_series([ref, short], AlignmentStrategy.TIMESTAMP)
        assert table.timestamps == [1, 2, 3]
        _same(table.columns["b"], [1, NAN, 3])

    def test_axis_is_union_of_timestamps(self):
        a = _series("a", [(10, 1), (30, 3)])
        b = _series("b", [(20, 2)])
        table = align_series([a, b], strategy="timestamp")
        assert table.timestamps == [10, 20, 30]
        _same(table.columns["a"], [1, NAN, 3])
        _same(table.columns["b"], [NAN, 2, NAN])

    def test_empty_input(self):
        assert align_series([], AlignmentStrategy.TIMESTAMP).is_empty


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        align_series([], strategy="nearest")
