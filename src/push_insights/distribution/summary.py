from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass

import numpy as np

from push_insights.errors import EmptyDatasetError

DEFAULT_LABEL_GAP = 8.0


@dataclass(frozen=True)
class BoxSummary:
    minimum: float
    q1: float
    median: float
    q3: float
    maximum: float

    def labels(self) -> list[float]:
        return [self.minimum, self.q1, self.median, self.q3, self.maximum]

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def box_summary(durations: Sequence[float]) -> BoxSummary:
    values = np.sort(np.asarray(durations, dtype=float))
    if values.size == 0:
        raise EmptyDatasetError("no durations to summarize")
    q1, median, q3 = np.quantile(values, [0.25, 0.5, 0.75])
    return BoxSummary(
        minimum=float(values[0]),
        q1=float(q1),
        median=float(median),
        q3=float(q3),
        maximum=float(values[-1]),
    )


def thin_box_labels(
    labels: Sequence[float],
    pixel_scale: Callable[[float], float],
    *,
    pixel_gap: float = DEFAULT_LABEL_GAP,
) -> list[float]:
    """Drop box plot labels that would print on top of each other.

    ``labels`` is ``[min, q1, median, q3, max]``. A box narrower than two gaps keeps
    only the median; any crowded neighbour pair keeps min, median and max.
    """
    if len(labels) != 5:
        raise ValueError("labels must be [min, q1, median, q3, max]")
    positions = [float(pixel_scale(value)) for value in labels]
    if abs(positions[4] - positions[0]) < pixel_gap * 2:
        return [labels[2]]
    for left, right in zip(positions, positions[1:]):
        if abs(right - left) < pixel_gap:
            return [labels[0], labels[2], labels[4]]
    return list(labels)
