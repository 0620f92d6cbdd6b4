from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from push_insights.charts.base import Chart, ChartResult
from push_insights.config import AppConfig
from push_insights.io.records import PushRecord, load_push_records
from push_insights.io.write import artifact_name, write_summary, write_table
from push_insights.paths import build_output_paths
from push_insights.viz.distributions import plot_cdf, plot_dot_strip, plot_duration_bars
from push_insights.viz.timeline import plot_timeline

LOGGER = logging.getLogger(__name__)


def load_configured_records(records_path: Path | None, config: AppConfig) -> list[PushRecord]:
    source = records_path or config.input.records_path
    if not source:
        raise ValueError("records path must be given or set as input.records_path")
    records = load_push_records(source, fmt=config.input.format)
    LOGGER.info("Loaded %d push records from %s", len(records), source)
    return records


def _render_chart_figures(
    results: dict[str, ChartResult],
    out_dir: Path,
    config: AppConfig,
) -> None:
    paths = build_output_paths(out_dir)
    figure_suffix = config.outputs.figures_format

    try:
        timeline = results.get("timeline")
        if timeline is not None:
            plot_timeline(
                timeline.tables.get("rows", pd.DataFrame()),
                row_count=int(timeline.summary.get("row_count", 0)),
                output_path=paths.figures / f"timeline.{figure_suffix}",
            )

        distribution = results.get("distribution")
        if distribution is not None:
            unit = str(distribution.summary.get("unit", ""))
            current = distribution.summary.get("current_push") or {}
            plot_cdf(
                distribution.tables.get("cdf", pd.DataFrame()),
                distribution.tables.get("quantile_markers", pd.DataFrame()),
                paths.figures / f"cdf.{figure_suffix}",
                unit=unit,
                current_duration=current.get("duration"),
            )
            plot_dot_strip(
                distribution.tables.get("dot_offsets", pd.DataFrame()),
                paths.figures / f"dot_strip.{figure_suffix}",
                unit=unit,
            )
            box = distribution.tables.get("box_summary", pd.DataFrame())
            labels = (
                box.loc[box["labeled"].astype(bool), "value"].astype(float).tolist()
                if not box.empty
                else []
            )
            plot_duration_bars(
                distribution.tables.get("bars", pd.DataFrame()),
                labels,
                paths.figures / f"duration_bars.{figure_suffix}",
                unit=unit,
            )
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering one or more chart figures")


def run_charts(
    records: list[PushRecord],
    charts: list[Chart],
    out_dir: Path,
    config: AppConfig,
) -> dict[str, ChartResult]:
    paths = build_output_paths(out_dir)
    fmt = config.outputs.tables_format

    results: dict[str, ChartResult] = {}
    for chart in charts:
        result = chart.build(records)
        results[result.chart] = result

        write_summary(result.summary, paths.summary, result.chart)
        for table_name, table in result.tables.items():
            write_table(table, paths.tables, artifact_name(result.chart, table_name), fmt=fmt)
        LOGGER.info("Built %s chart data (%d tables)", result.chart, len(result.tables))

    if config.outputs.render_figures:
        _render_chart_figures(results=results, out_dir=out_dir, config=config)
    return results
