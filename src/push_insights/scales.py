from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class LinearScale:
    """Maps a value domain onto a pixel range, like a chart axis."""

    domain_min: float
    domain_max: float
    range_min: float
    range_max: float

    def __call__(self, value: float) -> float:
        span = self.domain_max - self.domain_min
        if span == 0:
            return self.range_min
        fraction = (float(value) - self.domain_min) / span
        return self.range_min + fraction * (self.range_max - self.range_min)

    @classmethod
    def for_values(cls, values: Iterable[float], width_px: float) -> LinearScale:
        """Zero-anchored scale whose domain ends at the largest value."""
        upper = max((float(value) for value in values), default=0.0)
        return cls(domain_min=0.0, domain_max=max(upper, 0.0), range_min=0.0, range_max=width_px)
