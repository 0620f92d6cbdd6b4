from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Interval:
    id: str
    start_time: float
    end_time: float
    state: int | None = None

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class RowAssignment:
    interval_id: str
    row: int


@dataclass(frozen=True)
class PackingResult:
    assignments: tuple[RowAssignment, ...]
    row_count: int

    @property
    def rows(self) -> list[int]:
        return [assignment.row for assignment in self.assignments]


def pack_rows(intervals: Sequence[Interval]) -> PackingResult:
    """Assign intervals to the fewest rows such that no row holds two overlapping intervals.

    Intervals are visited by ascending start time (ties keep input order). Each pass fills
    one row greedily: an interval joins the row when it starts at or after the end of the
    last interval placed there, so touching intervals share a row. Intervals that do not
    fit are deferred to the next pass. First-fit in start order is optimal for interval
    graphs, so the row count equals the maximum number of intervals overlapping at once.

    Assignments are returned parallel to ``intervals``; the inputs are not modified.
    """
    for interval in intervals:
        if interval.end_time < interval.start_time:
            raise ValueError(f"interval {interval.id!r} ends before it starts")

    rows: list[int] = [-1] * len(intervals)
    remaining = sorted(range(len(intervals)), key=lambda index: intervals[index].start_time)

    row_index = 0
    while remaining:
        deferred: list[int] = []
        last_end_time = float("-inf")
        for index in remaining:
            interval = intervals[index]
            if interval.start_time >= last_end_time:
                rows[index] = row_index
                last_end_time = interval.end_time
            else:
                deferred.append(index)
        remaining = deferred
        row_index += 1

    assignments = tuple(
        RowAssignment(interval_id=interval.id, row=row) for interval, row in zip(intervals, rows)
    )
    return PackingResult(assignments=assignments, row_count=row_index)
