from __future__ import annotations

import json
from pathlib import Path

import pytest

NSEC = 10**9
MINUTE = 60 * NSEC
T0 = 1_600_000_000 * NSEC


def push_payload(
    push_id: str | None,
    *,
    offset_minutes: float,
    duration_minutes: float,
    final_state: int,
) -> dict[str, object]:
    """One unstaged queue transition, one staged transition, then the final state."""
    start = T0 + int(offset_minutes * MINUTE)
    staged = start + MINUTE
    end = staged + int(duration_minutes * MINUTE)
    return {
        "push_handle": push_id,
        "state_info": [
            {"stage": "", "state": 1, "start_time_nsec": start},
            {"stage": "canary", "state": 3, "start_time_nsec": staged},
            {"stage": "", "state": final_state, "start_time_nsec": end},
        ],
    }


@pytest.fixture
def pushes_payload() -> list[dict[str, object]]:
    return [
        push_payload("p1", offset_minutes=0, duration_minutes=1, final_state=5),
        push_payload("p2", offset_minutes=1, duration_minutes=2, final_state=5),
        push_payload("p3", offset_minutes=10, duration_minutes=3, final_state=5),
        push_payload("p4", offset_minutes=11, duration_minutes=4, final_state=5),
        push_payload("p5", offset_minutes=30, duration_minutes=10, final_state=5),
        push_payload("p6", offset_minutes=2, duration_minutes=6, final_state=4),
        push_payload("p7", offset_minutes=40, duration_minutes=2, final_state=14),
        {"push_handle": "broken", "state_info": []},
    ]


@pytest.fixture
def records_file(tmp_path: Path, pushes_payload: list[dict[str, object]]) -> Path:
    path = tmp_path / "pushes.json"
    path.write_text(json.dumps(pushes_payload), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "outputs:\n  tables_format: csv\n  render_figures: false\n",
        encoding="utf-8",
    )
    return path
