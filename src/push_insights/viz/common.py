from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt

COMPLETED_COLOR = "#34a853"
FAILED_COLOR = "#d50000"
RUNNING_COLOR = "#2196f3"
NEUTRAL_COLOR = "#a9a9a9"

FAILED_STATES = frozenset({4, 6, 9, 12, 16, 18, 29})


def state_color(state: int | None, completed_state: int = 5) -> str:
    if state == completed_state:
        return COMPLETED_COLOR
    if state in FAILED_STATES:
        return FAILED_COLOR
    if state is None:
        return NEUTRAL_COLOR
    return RUNNING_COLOR


def save_figure(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return path
