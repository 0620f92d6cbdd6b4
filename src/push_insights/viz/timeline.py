from __future__ import annotations

from pathlib import Path

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import pandas as pd

from push_insights.viz.common import save_figure, state_color

MSEC_PER_DAY = 86_400_000.0


def plot_timeline(timeline_rows: pd.DataFrame, row_count: int, output_path: Path) -> Path | None:
    """Draw each packed push as a bar on its assigned row."""
    required = {"start_time", "end_time", "row", "state"}
    if timeline_rows.empty or not required.issubset(set(timeline_rows.columns)):
        return None

    starts = pd.to_datetime(timeline_rows["start_time"], unit="ms")
    left = mdates.date2num(starts.to_numpy())
    widths = (timeline_rows["end_time"] - timeline_rows["start_time"]).to_numpy(
        dtype=float
    ) / MSEC_PER_DAY
    colors = [
        state_color(None if pd.isna(value) else int(value)) for value in timeline_rows["state"]
    ]

    rows_drawn = max(int(row_count), 1)
    fig, ax = plt.subplots(figsize=(12, max(2.0, 0.35 * rows_drawn + 1.0)))
    ax.barh(
        timeline_rows["row"].to_numpy(dtype=float),
        widths,
        left=left,
        height=0.8,
        color=colors,
        edgecolor="#373c38",
        linewidth=0.4,
    )
    ax.xaxis_date()
    ax.set_ylim(rows_drawn - 0.5, -0.5)
    ax.set_yticks([])
    ax.set_title("Push timeline")
    ax.set_xlabel("Start time (UTC)")
    fig.autofmt_xdate()
    return save_figure(output_path)
