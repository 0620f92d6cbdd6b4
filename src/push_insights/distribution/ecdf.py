from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import numpy as np

from push_insights.config import PERCENT_SCALE
from push_insights.errors import DegenerateDistributionError, EmptyDatasetError, OutOfRangeError

TiePolicy = Literal["max_rank", "ordinal"]


@dataclass(frozen=True)
class DurationSample:
    duration: float
    probability: float
    end_state: int | None = None


def _columns(table: Sequence[DurationSample]) -> tuple[np.ndarray, np.ndarray]:
    if not table:
        raise EmptyDatasetError("distribution table is empty")
    durations = np.fromiter((sample.duration for sample in table), dtype=float, count=len(table))
    probabilities = np.fromiter(
        (sample.probability for sample in table), dtype=float, count=len(table)
    )
    return durations, probabilities


def build_table(
    durations: Sequence[float],
    *,
    end_states: Sequence[int | None] | None = None,
    scale: float = PERCENT_SCALE,
    tie_policy: TiePolicy = "max_rank",
) -> list[DurationSample]:
    """Sort durations and attach empirical CDF probabilities ``rank * scale / n``.

    With ``tie_policy="max_rank"`` tied durations all share the probability of the last
    tied sample, which is the value of the ECDF at that duration. ``"ordinal"`` keeps
    the 1-based position in the stable sort, so ties rank by input order.
    """
    values = np.asarray(durations, dtype=float)
    if values.ndim != 1:
        raise OutOfRangeError("durations must be a flat sequence")
    if end_states is not None and len(end_states) != values.size:
        raise ValueError("end_states must be parallel to durations")
    if values.size == 0:
        return []
    if not np.all(np.isfinite(values)) or np.any(values < 0.0):
        raise OutOfRangeError("durations must be finite and non-negative")

    order = np.argsort(values, kind="stable")
    sorted_values = values[order]
    n = sorted_values.size
    if tie_policy == "max_rank":
        ranks = np.searchsorted(sorted_values, sorted_values, side="right")
    elif tie_policy == "ordinal":
        ranks = np.arange(1, n + 1)
    else:
        raise ValueError(f"Unsupported tie policy: {tie_policy}")
    probabilities = ranks * float(scale) / n

    table: list[DurationSample] = []
    for position, source_index in enumerate(order):
        end_state = end_states[int(source_index)] if end_states is not None else None
        table.append(
            DurationSample(
                duration=float(sorted_values[position]),
                probability=float(probabilities[position]),
                end_state=end_state,
            )
        )
    return table


def probability_for_duration(table: Sequence[DurationSample], duration: float) -> float:
    """ECDF value at ``duration``: probability of the last sample with duration <= it."""
    durations, probabilities = _columns(table)
    index = int(np.searchsorted(durations, float(duration), side="right"))
    if index == 0:
        return 0.0
    return float(probabilities[index - 1])


def duration_for_probability(table: Sequence[DurationSample], probability: float) -> float:
    """Inverse ECDF with linear interpolation between the neighbouring samples."""
    durations, probabilities = _columns(table)
    target = float(probability)
    if not np.isfinite(target) or target < 0.0 or target > probabilities[-1]:
        raise OutOfRangeError(
            f"probability {probability} outside [0, {float(probabilities[-1])}]"
        )
    if target <= probabilities[0]:
        return float(durations[0])
    if target >= probabilities[-1]:
        return float(durations[-1])

    left = int(np.searchsorted(probabilities, target, side="left")) - 1
    right = int(np.searchsorted(probabilities, target, side="right"))
    span = probabilities[right] - probabilities[left]
    if not span > 0.0:
        raise DegenerateDistributionError(
            f"samples {left} and {right} share probability {float(probabilities[left])}"
        )
    fraction = (target - probabilities[left]) / span
    return float(durations[left] + fraction * (durations[right] - durations[left]))
