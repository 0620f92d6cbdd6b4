from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd

from push_insights.io.records import PushRecord
from push_insights.preprocess.extract import SkippedRecord

SKIPPED_COLUMNS = ["extraction", "push_id", "reason"]


@dataclass(frozen=True)
class ChartResult:
    chart: str
    summary: dict[str, Any]
    tables: dict[str, pd.DataFrame]


class Chart:
    name: str

    def build(self, records: list[PushRecord]) -> ChartResult:
        raise NotImplementedError


def skipped_frame(skipped_by_extraction: dict[str, list[SkippedRecord]]) -> pd.DataFrame:
    """One diagnostic row per skipped record, tagged with the extraction that dropped it."""
    return pd.DataFrame(
        [
            {"extraction": extraction, "push_id": item.push_id, "reason": item.reason.value}
            for extraction, skipped in skipped_by_extraction.items()
            for item in skipped
        ],
        columns=SKIPPED_COLUMNS,
    )
