from __future__ import annotations

import pandas as pd

from push_insights.charts.base import Chart, ChartResult, skipped_frame
from push_insights.io.records import PushRecord
from push_insights.preprocess.extract import NSEC_PER_MSEC, extract_timeline_intervals
from push_insights.timeline.packing import pack_rows

TIMELINE_COLUMNS = ["id", "state", "start_time", "end_time", "row"]


class TimelineChart(Chart):
    name = "timeline"

    def build(self, records: list[PushRecord]) -> ChartResult:
        extraction = extract_timeline_intervals(records, divisor=NSEC_PER_MSEC)
        intervals = extraction.valid
        packing = pack_rows(intervals)

        rows = pd.DataFrame(
            [
                {
                    "id": interval.id,
                    "state": interval.state,
                    "start_time": interval.start_time,
                    "end_time": interval.end_time,
                    "row": assignment.row,
                }
                for interval, assignment in zip(intervals, packing.assignments)
            ],
            columns=TIMELINE_COLUMNS,
        )
        return ChartResult(
            chart=self.name,
            summary={
                "row_count": packing.row_count,
                "interval_count": len(intervals),
                "skipped_count": len(extraction.skipped),
            },
            tables={
                "rows": rows,
                "skipped": skipped_frame({"intervals": extraction.skipped}),
            },
        )
