from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from push_insights.distribution.ecdf import DurationSample, probability_for_duration
from push_insights.io.records import PushRecord
from push_insights.preprocess.extract import find_push_window


@dataclass(frozen=True)
class PushComparison:
    push_id: str | None
    duration: float
    probability: float


def compare_push(
    table: Sequence[DurationSample],
    record: PushRecord,
    *,
    completed_state: int,
    divisor: float,
) -> PushComparison | None:
    """Position a completed push on the historical duration distribution."""
    if record.final_state != completed_state:
        return None
    window = find_push_window(record)
    if window is None:
        return None
    duration = window.duration_nsec / divisor
    return PushComparison(
        push_id=record.push_id,
        duration=duration,
        probability=probability_for_duration(table, duration),
    )
