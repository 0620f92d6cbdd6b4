from __future__ import annotations

import numpy as np
import pytest

from push_insights.distribution.ecdf import (
    DurationSample,
    build_table,
    duration_for_probability,
    probability_for_duration,
)
from push_insights.errors import DegenerateDistributionError, EmptyDatasetError, OutOfRangeError


@pytest.fixture
def table() -> list[DurationSample]:
    return build_table([4.0, 1.0, 10.0, 3.0, 2.0])


def test_build_table_sorts_and_ranks(table: list[DurationSample]) -> None:
    assert [sample.duration for sample in table] == [1.0, 2.0, 3.0, 4.0, 10.0]
    assert [sample.probability for sample in table] == [20.0, 40.0, 60.0, 80.0, 100.0]


def test_build_table_supports_fraction_scale_and_carries_end_states() -> None:
    table = build_table([3.0, 1.0], end_states=[5, 6], scale=1.0)

    assert [sample.probability for sample in table] == pytest.approx([0.5, 1.0])
    assert [sample.end_state for sample in table] == [6, 5]


def test_build_table_tie_policies() -> None:
    durations = [2.0, 1.0, 4.0, 2.0]

    max_rank = build_table(durations)
    ordinal = build_table(durations, tie_policy="ordinal")

    assert [sample.probability for sample in max_rank] == [25.0, 75.0, 75.0, 100.0]
    assert [sample.probability for sample in ordinal] == [25.0, 50.0, 75.0, 100.0]
    with pytest.raises(ValueError, match="tie policy"):
        build_table(durations, tie_policy="average")  # type: ignore[arg-type]


def test_build_table_edge_cases() -> None:
    assert build_table([]) == []
    with pytest.raises(OutOfRangeError):
        build_table([1.0, -0.5])
    with pytest.raises(OutOfRangeError):
        build_table([1.0, float("nan")])
    with pytest.raises(ValueError, match="parallel"):
        build_table([1.0, 2.0], end_states=[5])


def test_probability_for_duration_reads_the_step_function(table: list[DurationSample]) -> None:
    assert probability_for_duration(table, 3.5) == 60.0
    assert probability_for_duration(table, 3.0) == 60.0
    assert probability_for_duration(table, 0.5) == 0.0
    assert probability_for_duration(table, 250.0) == 100.0


def test_probability_for_duration_round_trips_table_entries(table: list[DurationSample]) -> None:
    for sample in table:
        assert probability_for_duration(table, sample.duration) == sample.probability


def test_probability_for_duration_is_monotonic() -> None:
    rng = np.random.default_rng(5)
    table = build_table(rng.exponential(scale=30.0, size=200).tolist())

    grid = np.linspace(0.0, 300.0, 500)
    values = [probability_for_duration(table, float(point)) for point in grid]

    assert all(later >= earlier for earlier, later in zip(values, values[1:]))


def test_duration_for_probability_interpolates(table: list[DurationSample]) -> None:
    assert duration_for_probability(table, 50.0) == pytest.approx(2.5)
    assert duration_for_probability(table, 60.0) == pytest.approx(3.0)
    assert duration_for_probability(table, 90.0) == pytest.approx(7.0)


def test_duration_for_probability_boundaries(table: list[DurationSample]) -> None:
    assert duration_for_probability(table, 0.0) == 1.0
    assert duration_for_probability(table, 10.0) == 1.0
    assert duration_for_probability(table, 100.0) == 10.0
    with pytest.raises(OutOfRangeError):
        duration_for_probability(table, 100.5)
    with pytest.raises(OutOfRangeError):
        duration_for_probability(table, -1.0)


def test_duration_for_probability_rejects_unusable_neighbours() -> None:
    table = [
        DurationSample(duration=1.0, probability=20.0),
        DurationSample(duration=2.0, probability=float("nan")),
        DurationSample(duration=3.0, probability=100.0),
    ]

    with pytest.raises(DegenerateDistributionError):
        duration_for_probability(table, 50.0)


def test_lookups_on_empty_table_raise() -> None:
    with pytest.raises(EmptyDatasetError):
        probability_for_duration([], 1.0)
    with pytest.raises(EmptyDatasetError):
        duration_for_probability([], 50.0)
