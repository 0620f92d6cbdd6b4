from __future__ import annotations

import math

import numpy as np
import pytest

from push_insights.distribution.placement import (
    dot_radius_for_count,
    generate_collision_free_offsets,
)
from push_insights.scales import LinearScale


def _identity(value: float) -> float:
    return value


def test_dot_radius_shrinks_for_dense_plots() -> None:
    assert dot_radius_for_count(10) == 2.5
    assert dot_radius_for_count(100) == 2.5
    assert dot_radius_for_count(101) == 1.4
    assert dot_radius_for_count(5, radius=3.0, dense_radius=1.0, dense_threshold=4) == 1.0


def test_identical_durations_stack_vertically() -> None:
    offsets = generate_collision_free_offsets(2.0, _identity, [5.0, 5.0, 5.0])

    assert offsets == pytest.approx([0.0, 4.0, 8.0], abs=1e-5)


def test_distant_dots_stay_on_baseline() -> None:
    offsets = generate_collision_free_offsets(2.0, _identity, [0.0, 10.0, 20.0])

    assert offsets == [0.0, 0.0, 0.0]


def test_zero_duration_dots_are_placed_like_any_other() -> None:
    offsets = generate_collision_free_offsets(2.0, _identity, [0.0, 0.0])

    assert offsets[0] == 0.0
    assert offsets[1] > 0.0


def test_offsets_are_empty_for_no_durations() -> None:
    assert generate_collision_free_offsets(2.5, _identity, []) == []


def test_offsets_reject_non_positive_radius() -> None:
    with pytest.raises(ValueError, match="radius"):
        generate_collision_free_offsets(0.0, _identity, [1.0])


def test_offsets_never_overlap_on_random_samples() -> None:
    rng = np.random.default_rng(7)
    durations = rng.exponential(scale=20.0, size=150).tolist()
    scale = LinearScale.for_values(durations, 400.0)
    radius = 2.5

    offsets = generate_collision_free_offsets(radius, scale, durations)

    assert len(offsets) == len(durations)
    assert all(offset >= 0.0 for offset in offsets)
    centres = [(scale(value), offset) for value, offset in zip(durations, offsets)]
    for i, (x1, y1) in enumerate(centres):
        for x2, y2 in centres[i + 1 :]:
            assert math.hypot(x2 - x1, y2 - y1) >= 2 * radius - 1e-6


def test_offsets_reject_non_positive_epsilon() -> None:
    with pytest.raises(ValueError, match="epsilon"):
        generate_collision_free_offsets(1.0, _identity, [0.0, 0.1, 0.05], epsilon=0.0)


@pytest.mark.parametrize("dx", [0.0137, 0.0411, 0.1507, 0.1644, 0.2603, 0.3288])
def test_offsets_settle_when_a_lift_lands_exactly_on_a_diameter(dx: float) -> None:
    durations = [0.0, dx, dx / 2]

    offsets = generate_collision_free_offsets(1.0, _identity, durations, epsilon=1e-12)

    centres = list(zip(durations, offsets))
    for i, (x1, y1) in enumerate(centres):
        for x2, y2 in centres[i + 1 :]:
            assert math.hypot(x2 - x1, y2 - y1) >= 2.0 - 1e-9
