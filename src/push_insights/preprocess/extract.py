from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from push_insights.io.records import PushRecord
from push_insights.timeline.packing import Interval

LOGGER = logging.getLogger(__name__)

NSEC_PER_SECOND = 10**9
NSEC_PER_MSEC = 10**6

UNIT_CONVERSION: dict[str, int] = {
    "seconds": NSEC_PER_SECOND,
    "minutes": NSEC_PER_SECOND * 60,
    "hours": NSEC_PER_SECOND * 60 * 60,
    "days": NSEC_PER_SECOND * 60 * 60 * 24,
}
DEFAULT_DURATION_UNIT = "minutes"

T = TypeVar("T")


class SkipReason(str, Enum):
    missing_push_id = "missing push id"
    no_state_transitions = "no state transitions"
    missing_start_time = "missing start time"
    missing_end_time = "missing end time"
    missing_final_state = "missing final state"
    no_staged_transition = "no staged transition"


@dataclass(frozen=True)
class SkippedRecord:
    push_id: str | None
    reason: SkipReason


@dataclass
class ExtractionResult(Generic[T]):
    """Values extracted from records plus diagnostics for the ones that were skipped."""

    valid: list[T] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)

    def skip(self, record: PushRecord, reason: SkipReason) -> None:
        self.skipped.append(SkippedRecord(push_id=record.push_id, reason=reason))

    def log_skipped(self, label: str) -> None:
        if self.skipped:
            LOGGER.info(
                "Skipped %d of %d push records while extracting %s",
                len(self.skipped),
                len(self.skipped) + len(self.valid),
                label,
            )


@dataclass(frozen=True)
class PushWindow:
    """Measured span of a push: first staged transition to the last transition."""

    start_nsec: int
    end_nsec: int

    @property
    def duration_nsec(self) -> int:
        return self.end_nsec - self.start_nsec


@dataclass(frozen=True)
class PushDuration:
    push_id: str | None
    duration: float
    end_state: int


@dataclass(frozen=True)
class PushBar:
    push_id: str
    end_state: int
    start_time: datetime
    duration: float


def _window_problem(record: PushRecord) -> SkipReason | None:
    if not record.states:
        return SkipReason.no_state_transitions
    if not record.states[-1].start_time_nsec:
        return SkipReason.missing_end_time
    if not record.final_state:
        return SkipReason.missing_final_state
    return None


def find_push_window(record: PushRecord) -> PushWindow | None:
    if not record.states or not record.states[-1].start_time_nsec:
        return None
    for transition in record.states:
        if transition.stage and transition.start_time_nsec:
            return PushWindow(
                start_nsec=int(transition.start_time_nsec),
                end_nsec=int(record.states[-1].start_time_nsec),
            )
    return None


def find_duration_unit(records: Iterable[PushRecord]) -> str:
    """Pick the display unit most pushes are naturally measured in."""
    votes = {unit: 0 for unit in UNIT_CONVERSION}
    for record in records:
        if _window_problem(record) is not None:
            continue
        window = find_push_window(record)
        if window is None:
            continue
        for unit in ("days", "hours", "minutes", "seconds"):
            if window.duration_nsec / UNIT_CONVERSION[unit] > 1:
                votes[unit] += 1
                break

    best_unit = DEFAULT_DURATION_UNIT
    best_count = 0
    for unit, count in votes.items():
        if count > best_count:
            best_unit = unit
            best_count = count
    return best_unit


def resolve_duration_unit(records: list[PushRecord], configured: str) -> str:
    if configured == "auto":
        return find_duration_unit(records)
    if configured not in UNIT_CONVERSION:
        raise ValueError(f"Unsupported duration unit: {configured}")
    return configured


def extract_timeline_intervals(
    records: Iterable[PushRecord], *, divisor: float = NSEC_PER_MSEC
) -> ExtractionResult[Interval]:
    """Build one interval per push from its first to its last transition."""
    result: ExtractionResult[Interval] = ExtractionResult()
    for record in records:
        if not record.states:
            result.skip(record, SkipReason.no_state_transitions)
            continue
        start_nsec = record.states[0].start_time_nsec
        if not start_nsec:
            result.skip(record, SkipReason.missing_start_time)
            continue
        end_nsec = record.states[-1].start_time_nsec
        if not end_nsec:
            result.skip(record, SkipReason.missing_end_time)
            continue
        if not record.push_id:
            result.skip(record, SkipReason.missing_push_id)
            continue
        if not record.final_state:
            result.skip(record, SkipReason.missing_final_state)
            continue
        result.valid.append(
            Interval(
                id=record.push_id,
                start_time=start_nsec / divisor,
                end_time=end_nsec / divisor,
                state=record.final_state,
            )
        )
    result.log_skipped("timeline intervals")
    return result


def extract_durations(
    records: Iterable[PushRecord],
    *,
    divisor: float,
    completed_state: int | None = None,
) -> ExtractionResult[PushDuration]:
    """Measure each push window, optionally keeping completed pushes only."""
    result: ExtractionResult[PushDuration] = ExtractionResult()
    for record in records:
        if not record.push_id:
            result.skip(record, SkipReason.missing_push_id)
            continue
        problem = _window_problem(record)
        if problem is not None:
            result.skip(record, problem)
            continue
        window = find_push_window(record)
        if window is None:
            result.skip(record, SkipReason.no_staged_transition)
            continue
        end_state = int(record.final_state or 0)
        if completed_state is not None and end_state != completed_state:
            continue
        result.valid.append(
            PushDuration(
                push_id=record.push_id,
                duration=window.duration_nsec / divisor,
                end_state=end_state,
            )
        )
    result.log_skipped("push durations")
    return result


def extract_bar_rows(
    records: Iterable[PushRecord],
    *,
    divisor: float,
    excluded_end_states: Iterable[int] = (),
) -> ExtractionResult[PushBar]:
    """Rows of the per-push duration bar chart, ordered by push start time."""
    excluded = {int(value) for value in excluded_end_states}
    result: ExtractionResult[PushBar] = ExtractionResult()
    for record in records:
        if not record.push_id:
            result.skip(record, SkipReason.missing_push_id)
            continue
        problem = _window_problem(record)
        if problem is not None:
            result.skip(record, problem)
            continue
        # Single-transition pushes have no duration to show.
        if len(record.states) == 1 or record.final_state in excluded:
            continue
        start_nsec = record.states[0].start_time_nsec
        if not start_nsec:
            result.skip(record, SkipReason.missing_start_time)
            continue
        window = find_push_window(record)
        if window is None:
            result.skip(record, SkipReason.no_staged_transition)
            continue
        result.valid.append(
            PushBar(
                push_id=record.push_id,
                end_state=int(record.final_state or 0),
                start_time=datetime.fromtimestamp(start_nsec / NSEC_PER_SECOND, tz=timezone.utc),
                duration=window.duration_nsec / divisor,
            )
        )
    result.valid.sort(key=lambda bar: bar.start_time)
    result.log_skipped("bar chart rows")
    return result
