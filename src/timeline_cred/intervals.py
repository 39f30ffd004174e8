"""
Partitioning of node timestamps into contiguous, equal-length intervals.

Intervals are half-open ``[start, end)`` except the last one, which is closed
so that the latest timestamp always falls inside the sequence.
"""
from __future__ import annotations

import bisect
from typing import Iterable, List, Optional, Sequence, Union

from pydantic import ValidationError

from .errors import MalformedIntervalsError
from .models import Interval


def partition_intervals(timestamps: Iterable[Optional[int]], interval_length_ms: int) -> List[Interval]:
    if interval_length_ms <= 0:
        raise ValueError("interval_length_ms must be positive")
    present = [t for t in timestamps if t is not None]
    if not present:
        return []
    first, last = min(present), max(present)
    count = max(1, -(-(last - first) // interval_length_ms))
    return [
        Interval(
            start_time_ms=first + i * interval_length_ms,
            end_time_ms=first + (i + 1) * interval_length_ms,
        )
        for i in range(count)
    ]


def validate_intervals(intervals: Sequence[Union[Interval, dict]]) -> List[Interval]:
    """Coerce and check a sequence of intervals; gaps and overlaps are fatal."""
    try:
        result = [i if isinstance(i, Interval) else Interval.model_validate(i) for i in intervals]
    except ValidationError as exc:
        raise MalformedIntervalsError(str(exc)) from exc
    for i, (current, following) in enumerate(zip(result, result[1:])):
        if current.end_time_ms != following.start_time_ms:
            kind = "gap" if current.end_time_ms < following.start_time_ms else "overlap"
            raise MalformedIntervalsError(
                f"{kind} between interval {i} (ends {current.end_time_ms}) "
                f"and interval {i + 1} (starts {following.start_time_ms})"
            )
    return result


def interval_index(intervals: Sequence[Interval], timestamp_ms: int) -> Optional[int]:
    """
    Return the index of the interval holding ``timestamp_ms``.

    Times before the first interval map to -1 and times after the last
    interval map to None.
    """
    if not intervals:
        return None
    if timestamp_ms < intervals[0].start_time_ms:
        return -1
    if timestamp_ms > intervals[-1].end_time_ms:
        return None
    starts = [i.start_time_ms for i in intervals]
    return min(bisect.bisect_right(starts, timestamp_ms) - 1, len(intervals) - 1)
