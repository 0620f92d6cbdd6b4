from __future__ import annotations

import math
from collections.abc import Callable, Sequence

DEFAULT_RADIUS = 2.5
DEFAULT_DENSE_RADIUS = 1.4
DEFAULT_DENSE_THRESHOLD = 100
DEFAULT_EPSILON = 1e-6


def dot_radius_for_count(
    count: int,
    *,
    radius: float = DEFAULT_RADIUS,
    dense_radius: float = DEFAULT_DENSE_RADIUS,
    dense_threshold: int = DEFAULT_DENSE_THRESHOLD,
) -> float:
    return dense_radius if count > dense_threshold else radius


def generate_collision_free_offsets(
    radius: float,
    pixel_scale: Callable[[float], float],
    durations: Sequence[float],
    *,
    epsilon: float = DEFAULT_EPSILON,
) -> list[float]:
    """Vertical offsets that stack dots of ``radius`` without overlap.

    Dots are placed in input order on the baseline ``y = 0``. A dot whose centre is
    closer than one diameter to a placed dot is lifted to sit ``epsilon`` above it,
    and the check repeats against every placed dot until it collides with none. The
    result is parallel to ``durations``.

    A dot resting on another within ``epsilon * diameter`` of a full diameter (squared)
    does not count as a collision, so float rounding after a lift cannot trigger the
    same lift again. Each placed dot can then lift a new dot at most once.
    """
    if radius <= 0.0:
        raise ValueError("radius must be > 0")
    if not epsilon > 0.0:
        raise ValueError("epsilon must be > 0")
    diameter = 2.0 * radius
    diameter2 = diameter**2
    collision2 = diameter2 - epsilon * diameter

    placed: list[tuple[float, float]] = []
    for value in durations:
        x = float(pixel_scale(value))
        y = 0.0
        for _ in range(len(placed) + 1):
            moved = False
            for xi, yi in placed:
                dx2 = (xi - x) ** 2
                if dx2 + (yi - y) ** 2 < collision2:
                    y = yi + math.sqrt(diameter2 - dx2) + epsilon
                    moved = True
            if not moved:
                break
        placed.append((x, y))
    return [y for _, y in placed]
