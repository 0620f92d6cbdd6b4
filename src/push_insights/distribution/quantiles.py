from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from push_insights.distribution.ecdf import DurationSample, duration_for_probability

DEFAULT_PIXEL_THRESHOLD = 15.0
DEFAULT_STEP = 1.0
DEFAULT_MIN_BOUND = 1.0
DEFAULT_MAX_BOUND = 99.0
DEFAULT_MAX_ITERATIONS = 100


@dataclass(frozen=True)
class QuantileMarker:
    duration: float
    probability: float


def _markers(table: Sequence[DurationSample], probabilities: Sequence[float]) -> list[QuantileMarker]:
    return [
        QuantileMarker(duration=duration_for_probability(table, value), probability=value)
        for value in probabilities
    ]


def generate_quantile_markers(
    table: Sequence[DurationSample],
    probabilities: Sequence[float],
    pixel_scale: Callable[[float], float],
    *,
    pixel_threshold: float = DEFAULT_PIXEL_THRESHOLD,
    step: float = DEFAULT_STEP,
    min_bound: float = DEFAULT_MIN_BOUND,
    max_bound: float = DEFAULT_MAX_BOUND,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> list[QuantileMarker]:
    """Place ``[low, mid, high]`` percentile guide lines far enough apart to label.

    While two neighbouring markers sit closer than ``pixel_threshold`` pixels, the low
    marker moves down and the high marker moves up by ``step``; the mid marker stays.
    Once low drops below ``min_bound`` or high exceeds ``max_bound`` (or the iteration
    budget runs out) only the mid marker is returned.
    """
    if len(probabilities) != 3:
        raise ValueError("probabilities must be [low, mid, high]")
    if step <= 0.0:
        raise ValueError("step must be > 0")
    low, mid, high = (float(value) for value in probabilities)
    # Absorbs float drift of fractional steps (0.9 + 9 * 0.01 > 0.99).
    tolerance = step * 1e-9

    for iteration in range(max_iterations + 1):
        widened_low = low - iteration * step
        widened_high = high + iteration * step
        if widened_low < min_bound - tolerance or widened_high > max_bound + tolerance:
            break
        markers = _markers(table, [widened_low, mid, widened_high])
        positions = [pixel_scale(marker.duration) for marker in markers]
        gaps = [abs(right - left) for left, right in zip(positions, positions[1:])]
        if all(gap >= pixel_threshold for gap in gaps):
            return markers
    return _markers(table, [mid])
