from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from push_insights.viz.common import COMPLETED_COLOR, save_figure, state_color


def plot_cdf(
    cdf_table: pd.DataFrame,
    quantile_markers: pd.DataFrame,
    output_path: Path,
    *,
    unit: str,
    current_duration: float | None = None,
) -> Path | None:
    """Step plot of the empirical CDF with percentile guides and the current push."""
    if cdf_table.empty or not {"duration", "probability"}.issubset(set(cdf_table.columns)):
        return None

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.step(
        cdf_table["duration"],
        cdf_table["probability"],
        where="post",
        color=COMPLETED_COLOR,
        linewidth=1.5,
    )
    for marker in quantile_markers.itertuples(index=False):
        ax.axvline(marker.duration, color="#167364", linewidth=0.8, linestyle=":")
        ax.annotate(
            f"p{marker.probability:g}",
            xy=(marker.duration, 1.0),
            xycoords=("data", "axes fraction"),
            ha="center",
            va="bottom",
            fontsize=8,
        )
    if current_duration is not None:
        ax.axvline(
            current_duration,
            color="#000000",
            linewidth=1.0,
            linestyle="--",
            label="Current push",
        )
        ax.legend(loc="lower right")
    ax.set_title("Completed push durations (CDF)", pad=14)
    ax.set_xlabel(f"Duration ({unit})")
    ax.set_ylabel("Probability")
    return save_figure(output_path)


def plot_dot_strip(dot_offsets: pd.DataFrame, output_path: Path, *, unit: str) -> Path | None:
    """Dot plot of durations stacked with their precomputed collision-free offsets."""
    required = {"x_px", "y_px", "radius_px"}
    if dot_offsets.empty or not required.issubset(set(dot_offsets.columns)):
        return None

    radius = float(dot_offsets["radius_px"].iloc[0])
    fig, ax = plt.subplots(figsize=(10, 3))
    ax.scatter(
        dot_offsets["x_px"],
        dot_offsets["y_px"],
        s=(2.0 * radius) ** 2,
        color=COMPLETED_COLOR,
        alpha=0.6,
        linewidths=0,
    )
    ax.set_aspect("equal", adjustable="datalim")
    ax.set_yticks([])
    ax.set_title("Completed push durations (dot plot)")
    ax.set_xlabel(f"Duration ({unit}, chart pixels)")
    return save_figure(output_path)


def plot_duration_bars(
    duration_bars: pd.DataFrame,
    box_labels: list[float],
    output_path: Path,
    *,
    unit: str,
) -> Path | None:
    """Per-push duration bars in start order, with the box summary labels on the side."""
    if duration_bars.empty or not {"push_id", "duration", "end_state"}.issubset(
        set(duration_bars.columns)
    ):
        return None

    fig, ax = plt.subplots(figsize=(12, 4))
    positions = range(len(duration_bars))
    ax.bar(
        positions,
        duration_bars["duration"],
        color=[state_color(int(value)) for value in duration_bars["end_state"]],
        alpha=0.85,
    )
    for value in box_labels:
        ax.axhline(value, color="#787878", linewidth=0.6, linestyle="--")
        ax.annotate(
            f"{value:.2f}",
            xy=(1.0, value),
            xycoords=("axes fraction", "data"),
            ha="left",
            va="center",
            fontsize=8,
        )
    ax.set_xticks(list(positions))
    ax.set_xticklabels(duration_bars["push_id"].astype(str), rotation=90, fontsize=7)
    ax.set_title("Push durations")
    ax.set_ylabel(f"Duration ({unit})")
    return save_figure(output_path)
