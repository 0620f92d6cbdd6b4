from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

TABLE_SUFFIXES = {"parquet": "parquet", "csv": "csv"}


def artifact_name(chart: str, table: str) -> str:
    return f"{chart}__{table}"


def table_path(directory: Path, name: str, fmt: str = "parquet") -> Path:
    suffix = TABLE_SUFFIXES.get(fmt)
    if suffix is None:
        raise ValueError(f"Unsupported table format: {fmt}")
    return directory / f"{name}.{suffix}"


def write_table(frame: pd.DataFrame, directory: Path, name: str, fmt: str = "parquet") -> Path:
    """Write ``frame`` as ``{directory}/{name}.{fmt}`` and return the path."""
    path = table_path(directory, name, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "csv":
        frame.to_csv(path, index=False)
    else:
        frame.to_parquet(path, index=False)
    return path


def write_summary(summary: dict[str, Any], directory: Path, name: str) -> Path:
    """Write a chart summary as sorted JSON; datetimes and other values fall back to str."""
    path = directory / f"{name}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, sort_keys=True, default=str), encoding="utf-8")
    return path
