from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd
import yaml

LOGGER = logging.getLogger(__name__)

CSV_COLUMNS = ["push_handle", "stage", "state", "start_time_nsec"]

_KEY_ALIASES = {
    "push_handle": ("push_handle", "pushHandle", "push_id"),
    "state_info": ("state_info", "stateInfo", "states"),
    "start_time_nsec": ("start_time_nsec", "startTimeNsec"),
}


@dataclass(frozen=True)
class StateTransition:
    stage: str | None
    state: int | None
    start_time_nsec: int | None


@dataclass(frozen=True)
class PushRecord:
    push_id: str | None
    states: tuple[StateTransition, ...]

    @property
    def final_state(self) -> int | None:
        if not self.states:
            return None
        return self.states[-1].state


def _lookup(payload: Mapping[str, Any], canonical: str) -> Any:
    for key in _KEY_ALIASES.get(canonical, (canonical,)):
        if key in payload:
            return payload[key]
    return None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return False
    return bool(pd.isna(value))


def _optional_int(value: Any, *, field_name: str) -> int | None:
    if _is_missing(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"push record field '{field_name}' must be an integer") from exc


def _optional_str(value: Any) -> str | None:
    if _is_missing(value):
        return None
    text = str(value).strip()
    return text or None


def parse_state_transition(payload: Mapping[str, Any]) -> StateTransition:
    return StateTransition(
        stage=_optional_str(payload.get("stage")),
        state=_optional_int(payload.get("state"), field_name="state"),
        start_time_nsec=_optional_int(
            _lookup(payload, "start_time_nsec"), field_name="start_time_nsec"
        ),
    )


def parse_push_record(payload: Mapping[str, Any]) -> PushRecord:
    raw_states = _lookup(payload, "state_info") or []
    if not isinstance(raw_states, Sequence) or isinstance(raw_states, (str, bytes)):
        raise ValueError("push record 'state_info' must be a list of transitions")
    states = []
    for raw_state in raw_states:
        if not isinstance(raw_state, Mapping):
            raise ValueError("push record transitions must be mappings/objects")
        states.append(parse_state_transition(raw_state))
    return PushRecord(
        push_id=_optional_str(_lookup(payload, "push_handle")),
        states=tuple(states),
    )


def parse_push_records(payload: Any) -> list[PushRecord]:
    """Parse a decoded record stream (list of pushes or ``{"pushes": [...]}``)."""
    if isinstance(payload, Mapping):
        payload = payload.get("pushes")
    if not isinstance(payload, list):
        raise ValueError("push records payload must be a list or contain a 'pushes' list")
    records = []
    for item in payload:
        if not isinstance(item, Mapping):
            raise ValueError("each push record must be a mapping/object")
        records.append(parse_push_record(item))
    return records


def records_from_frame(frame: pd.DataFrame) -> list[PushRecord]:
    """Group a long transition table into push records, preserving row order.

    Rows without a push handle cannot be attributed to a push, so each one becomes
    its own handle-less record; extraction reports those as missing a push id.
    """
    missing = [column for column in CSV_COLUMNS if column not in frame.columns]
    if missing:
        raise ValueError(f"Missing required columns in records table: {', '.join(missing)}")

    handles = frame["push_handle"].map(_optional_str)
    codes, _ = pd.factorize(handles)
    blank = codes < 0
    if blank.any():
        LOGGER.warning("%d transition rows have no push_handle", int(blank.sum()))
        first_free = codes.max() + 1
        codes[blank] = np.arange(first_free, first_free + int(blank.sum()))

    records: list[PushRecord] = []
    for _, group in frame.groupby(codes, sort=False):
        states = tuple(
            parse_state_transition(row)
            for row in group[CSV_COLUMNS[1:]].to_dict(orient="records")
        )
        records.append(
            PushRecord(push_id=_optional_str(group["push_handle"].iloc[0]), states=states)
        )
    return records


def _detect_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in {".yaml", ".yml"}:
        return "yaml"
    if suffix == ".csv":
        return "csv"
    raise ValueError(f"Unsupported records file type: {path.suffix}")


def load_push_records(path: str | Path, fmt: str = "auto") -> list[PushRecord]:
    source_path = Path(path)
    resolved_format = _detect_format(source_path) if fmt == "auto" else fmt

    if resolved_format == "csv":
        # Parsed as text so nanosecond timestamps never round-trip through float.
        frame = pd.read_csv(source_path, dtype=str)
        return records_from_frame(frame)
    if resolved_format not in {"json", "yaml"}:
        raise ValueError(f"Unsupported records format: {resolved_format}")

    with source_path.open("r", encoding="utf-8") as handle:
        if resolved_format == "json":
            payload = json.load(handle)
        else:
            payload = yaml.safe_load(handle)
    return parse_push_records(payload)
