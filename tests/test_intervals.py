from __future__ import annotations

import pytest
from pydantic import ValidationError

from timeline_cred import Interval, MalformedIntervalsError, interval_index, partition_intervals, validate_intervals


def test_partition_covers_range_with_equal_lengths():
    intervals = partition_intervals([5, None, 27, 12], 10)
    assert [(i.start_time_ms, i.end_time_ms) for i in intervals] == [(5, 15), (15, 25), (25, 35)]


def test_no_timestamps_gives_no_intervals():
    assert partition_intervals([None, None], 10) == []
    assert partition_intervals([], 10) == []


def test_single_timestamp_gives_one_interval():
    assert partition_intervals([100], 10) == [Interval(start_time_ms=100, end_time_ms=110)]


def test_maximum_on_boundary_stays_in_last_interval():
    intervals = partition_intervals([0, 20], 10)
    assert len(intervals) == 2
    assert interval_index(intervals, 20) == 1


def test_boundary_belongs_to_interval_it_starts():
    intervals = partition_intervals([0, 25], 10)
    assert interval_index(intervals, 10) == 1
    assert interval_index(intervals, 9) == 0
    assert interval_index(intervals, -1) == -1
    assert interval_index(intervals, 31) is None


def test_non_positive_length_rejected():
    with pytest.raises(ValueError):
        partition_intervals([1, 2], 0)


def test_gap_rejected():
    with pytest.raises(MalformedIntervalsError, match="gap"):
        validate_intervals([{"start_time_ms": 0, "end_time_ms": 10}, {"start_time_ms": 11, "end_time_ms": 20}])


def test_overlap_rejected():
    with pytest.raises(MalformedIntervalsError, match="overlap"):
        validate_intervals([Interval(start_time_ms=0, end_time_ms=10), Interval(start_time_ms=5, end_time_ms=20)])


def test_empty_interval_rejected():
    with pytest.raises(ValidationError):
        Interval(start_time_ms=10, end_time_ms=10)
    with pytest.raises(MalformedIntervalsError):
        validate_intervals([{"start_time_ms": 10, "end_time_ms": 3}])
