from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from push_insights.io.records import (
    CSV_COLUMNS,
    StateTransition,
    load_push_records,
    parse_push_record,
    parse_push_records,
    records_from_frame,
)
from push_insights.preprocess.extract import SkipReason, extract_durations


def test_parse_push_record_accepts_both_key_styles() -> None:
    snake = parse_push_record(
        {
            "push_handle": "p1",
            "state_info": [{"stage": "canary", "state": 5, "start_time_nsec": 10}],
        }
    )
    camel = parse_push_record(
        {"pushHandle": "p1", "stateInfo": [{"stage": "canary", "state": "5", "startTimeNsec": "10"}]}
    )

    assert snake == camel
    assert snake.states == (StateTransition(stage="canary", state=5, start_time_nsec=10),)
    assert snake.final_state == 5


def test_parse_push_record_treats_blank_values_as_unset() -> None:
    record = parse_push_record(
        {"push_handle": "  ", "state_info": [{"stage": "", "state": None, "start_time_nsec": ""}]}
    )

    assert record.push_id is None
    assert record.states == (StateTransition(stage=None, state=None, start_time_nsec=None),)
    assert parse_push_record({"push_handle": "p2"}).final_state is None


def test_parse_push_record_rejects_malformed_payloads() -> None:
    with pytest.raises(ValueError, match="must be a list"):
        parse_push_record({"push_handle": "p1", "state_info": "nope"})
    with pytest.raises(ValueError, match="mappings"):
        parse_push_record({"push_handle": "p1", "state_info": [1, 2]})
    with pytest.raises(ValueError, match="must be an integer"):
        parse_push_record({"push_handle": "p1", "state_info": [{"state": "done"}]})


def test_parse_push_records_accepts_wrapped_payload() -> None:
    records = parse_push_records({"pushes": [{"push_handle": "p1"}, {"push_handle": "p2"}]})

    assert [record.push_id for record in records] == ["p1", "p2"]
    with pytest.raises(ValueError, match="'pushes' list"):
        parse_push_records({"items": []})
    with pytest.raises(ValueError, match="mapping"):
        parse_push_records(["p1"])


def test_records_from_frame_groups_rows_in_order() -> None:
    frame = pd.DataFrame(
        {
            "push_handle": ["b", "b", "a"],
            "stage": [None, "canary", "canary"],
            "state": ["1", "5", "4"],
            "start_time_nsec": ["1", "2", "3"],
        }
    )

    records = records_from_frame(frame)

    assert [record.push_id for record in records] == ["b", "a"]
    assert records[0].states == (
        StateTransition(stage=None, state=1, start_time_nsec=1),
        StateTransition(stage="canary", state=5, start_time_nsec=2),
    )
    with pytest.raises(ValueError, match="Missing required columns"):
        records_from_frame(frame.drop(columns=["stage"]))


def test_load_push_records_reads_json_yaml_and_csv(
    tmp_path: Path, pushes_payload: list[dict[str, object]]
) -> None:
    json_path = tmp_path / "pushes.json"
    json_path.write_text(json.dumps({"pushes": pushes_payload}), encoding="utf-8")
    yaml_path = tmp_path / "pushes.yaml"
    yaml_path.write_text(
        "- push_handle: y1\n"
        "  state_info:\n"
        "    - {stage: canary, state: 3, start_time_nsec: 1000}\n"
        "    - {stage: '', state: 5, start_time_nsec: 5000}\n",
        encoding="utf-8",
    )
    large_nsec = 1_600_000_000_123_456_789
    csv_path = tmp_path / "pushes.csv"
    csv_path.write_text(
        ",".join(CSV_COLUMNS)
        + "\n"
        + f"c1,canary,3,{large_nsec}\n"
        + f"c1,,5,{large_nsec + 1}\n",
        encoding="utf-8",
    )

    from_json = load_push_records(json_path)
    from_yaml = load_push_records(yaml_path)
    from_csv = load_push_records(csv_path)

    assert len(from_json) == len(pushes_payload)
    assert from_json[0].push_id == "p1"
    assert from_yaml[0].final_state == 5
    assert from_yaml[0].states[0].start_time_nsec == 1000
    assert [state.start_time_nsec for state in from_csv[0].states] == [large_nsec, large_nsec + 1]
    assert from_csv[0].states[1].stage is None


def test_load_push_records_rejects_unknown_formats(tmp_path: Path) -> None:
    path = tmp_path / "pushes.txt"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported records file type"):
        load_push_records(path)
    with pytest.raises(ValueError, match="Unsupported records format"):
        load_push_records(path, fmt="xml")


def test_records_from_frame_keeps_handle_less_rows_apart() -> None:
    frame = pd.DataFrame(
        {
            "push_handle": ["a", None, "a", "", None],
            "stage": ["canary", "canary", None, None, None],
            "state": ["3", "3", "5", "5", "5"],
            "start_time_nsec": ["10", "20", "30", "40", "50"],
        }
    )

    records = records_from_frame(frame)

    assert [record.push_id for record in records] == ["a", None, None, None]
    assert [len(record.states) for record in records] == [2, 1, 1, 1]
    assert [record.states[0].start_time_nsec for record in records[1:]] == [20, 40, 50]


def test_handle_less_csv_rows_never_produce_a_duration(tmp_path: Path) -> None:
    csv_path = tmp_path / "pushes.csv"
    csv_path.write_text(
        ",".join(CSV_COLUMNS)
        + "\n"
        + "p1,canary,3,1000\n"
        + "p1,,5,4000\n"
        + ",canary,3,2000\n"
        + ",,5,90000\n",
        encoding="utf-8",
    )

    result = extract_durations(load_push_records(csv_path), divisor=1000)

    assert [(item.push_id, item.duration) for item in result.valid] == [("p1", 3.0)]
    assert [(item.push_id, item.reason) for item in result.skipped] == [
        (None, SkipReason.missing_push_id),
        (None, SkipReason.missing_push_id),
    ]
