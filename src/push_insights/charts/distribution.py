from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

import pandas as pd

from push_insights.charts.base import Chart, ChartResult, skipped_frame
from push_insights.config import DotPlotConfig, QuantileConfig
from push_insights.distribution.comparison import PushComparison, compare_push
from push_insights.distribution.ecdf import DurationSample, TiePolicy, build_table
from push_insights.distribution.placement import (
    dot_radius_for_count,
    generate_collision_free_offsets,
)
from push_insights.distribution.quantiles import QuantileMarker, generate_quantile_markers
from push_insights.distribution.summary import BoxSummary, box_summary, thin_box_labels
from push_insights.errors import DistributionError
from push_insights.io.records import PushRecord
from push_insights.preprocess.extract import (
    UNIT_CONVERSION,
    PushBar,
    PushDuration,
    extract_bar_rows,
    extract_durations,
    resolve_duration_unit,
)
from push_insights.scales import LinearScale

LOGGER = logging.getLogger(__name__)

CDF_COLUMNS = ["duration", "probability", "end_state"]
MARKER_COLUMNS = ["duration", "probability"]
DOT_COLUMNS = ["duration", "x_px", "y_px", "radius_px"]
BAR_COLUMNS = ["push_id", "end_state", "start_time", "duration"]
BOX_COLUMNS = ["statistic", "value", "labeled"]


class DistributionChart(Chart):
    name = "distribution"

    def __init__(
        self,
        *,
        completed_state: int = 5,
        excluded_end_states: list[int] | None = None,
        duration_unit: str = "auto",
        scale: float = 100.0,
        tie_policy: TiePolicy = "max_rank",
        quantiles: QuantileConfig | None = None,
        dot_plot: DotPlotConfig | None = None,
        width_px: float = 800.0,
        box_label_gap_px: float = 8.0,
        current_push_id: str | None = None,
    ) -> None:
        self.completed_state = int(completed_state)
        self.excluded_end_states = list(excluded_end_states or [])
        self.duration_unit = duration_unit
        self.scale = float(scale)
        self.tie_policy = tie_policy
        self.quantiles = quantiles or QuantileConfig()
        self.dot_plot = dot_plot or DotPlotConfig()
        self.width_px = float(width_px)
        self.box_label_gap_px = float(box_label_gap_px)
        self.current_push_id = current_push_id

    def build(self, records: list[PushRecord]) -> ChartResult:
        unit = resolve_duration_unit(records, self.duration_unit)
        divisor = UNIT_CONVERSION[unit]

        durations = extract_durations(records, divisor=divisor)
        completed = [item for item in durations.valid if item.end_state == self.completed_state]
        bars = extract_bar_rows(
            records, divisor=divisor, excluded_end_states=self.excluded_end_states
        )

        table = self._build_table(completed)
        pixel_scale = LinearScale.for_values(
            [sample.duration for sample in table], self.width_px
        )
        markers = self._quantile_markers(table, pixel_scale)
        radius = dot_radius_for_count(
            len(table),
            radius=self.dot_plot.radius,
            dense_radius=self.dot_plot.dense_radius,
            dense_threshold=self.dot_plot.dense_threshold,
        )
        offsets = generate_collision_free_offsets(
            radius,
            pixel_scale,
            [sample.duration for sample in table],
            epsilon=self.dot_plot.epsilon,
        )
        box, box_labels = self._box_summary(bars.valid)
        comparison = self._compare_current(records, table, divisor)

        summary: dict[str, Any] = {
            "unit": unit,
            "push_count": len(records),
            "measured_count": len(durations.valid),
            "completed_count": len(completed),
            "skipped_count": len(durations.skipped),
            "bars_skipped_count": len(bars.skipped),
            "probability_scale": self.scale,
            "quantile_markers": [asdict(marker) for marker in markers],
            "dot_radius_px": radius,
            "box_summary": box.to_dict() if box is not None else None,
            "current_push": asdict(comparison) if comparison is not None else None,
        }
        tables = {
            "cdf": pd.DataFrame([asdict(sample) for sample in table], columns=CDF_COLUMNS),
            "quantile_markers": pd.DataFrame(
                [asdict(marker) for marker in markers], columns=MARKER_COLUMNS
            ),
            "dot_offsets": pd.DataFrame(
                [
                    {
                        "duration": sample.duration,
                        "x_px": pixel_scale(sample.duration),
                        "y_px": offset,
                        "radius_px": radius,
                    }
                    for sample, offset in zip(table, offsets)
                ],
                columns=DOT_COLUMNS,
            ),
            "bars": pd.DataFrame([asdict(bar) for bar in bars.valid], columns=BAR_COLUMNS),
            "box_summary": _box_frame(box, box_labels),
            "skipped": skipped_frame(
                {"durations": durations.skipped, "bars": bars.skipped}
            ),
        }
        return ChartResult(chart=self.name, summary=summary, tables=tables)

    def _build_table(self, completed: list[PushDuration]) -> list[DurationSample]:
        if not completed:
            LOGGER.warning("No completed pushes; CDF chart has no data")
            return []
        try:
            return build_table(
                [item.duration for item in completed],
                end_states=[item.end_state for item in completed],
                scale=self.scale,
                tie_policy=self.tie_policy,
            )
        except DistributionError as exc:
            LOGGER.warning("No CDF data: %s", exc)
            return []

    def _quantile_markers(
        self, table: list[DurationSample], pixel_scale: LinearScale
    ) -> list[QuantileMarker]:
        if not table:
            return []
        settings = self.quantiles.scaled(self.scale)
        try:
            return generate_quantile_markers(
                table,
                settings["probabilities"],
                pixel_scale,
                pixel_threshold=settings["pixel_threshold"],
                step=settings["step"],
                min_bound=settings["min_bound"],
                max_bound=settings["max_bound"],
                max_iterations=settings["max_iterations"],
            )
        except DistributionError as exc:
            LOGGER.warning("No quantile markers: %s", exc)
            return []

    def _box_summary(self, bars: list[PushBar]) -> tuple[BoxSummary | None, list[float]]:
        try:
            box = box_summary([bar.duration for bar in bars])
        except DistributionError as exc:
            LOGGER.warning("No box summary: %s", exc)
            return None, []
        label_scale = LinearScale.for_values(box.labels(), self.width_px)
        return box, thin_box_labels(box.labels(), label_scale, pixel_gap=self.box_label_gap_px)

    def _compare_current(
        self, records: list[PushRecord], table: list[DurationSample], divisor: float
    ) -> PushComparison | None:
        if self.current_push_id is None:
            return None
        record = next(
            (item for item in records if item.push_id == self.current_push_id), None
        )
        if record is None:
            LOGGER.warning("Push %s not found in records", self.current_push_id)
            return None
        try:
            comparison = compare_push(
                table, record, completed_state=self.completed_state, divisor=divisor
            )
        except DistributionError as exc:
            LOGGER.warning("Cannot compare push %s: %s", self.current_push_id, exc)
            return None
        if comparison is None:
            LOGGER.info("Push %s is not a completed push; skipping comparison", record.push_id)
        return comparison


def _box_frame(box: BoxSummary | None, labels: list[float]) -> pd.DataFrame:
    if box is None:
        return pd.DataFrame(columns=BOX_COLUMNS)
    return pd.DataFrame(
        [
            {"statistic": name, "value": value, "labeled": value in labels}
            for name, value in box.to_dict().items()
        ],
        columns=BOX_COLUMNS,
    )
