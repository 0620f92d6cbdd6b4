from __future__ import annotations

from push_insights.charts.base import Chart
from push_insights.charts.distribution import DistributionChart
from push_insights.charts.timeline import TimelineChart
from push_insights.config import AppConfig


def distribution_chart(config: AppConfig, current_push_id: str | None = None) -> DistributionChart:
    return DistributionChart(
        completed_state=config.extraction.completed_state,
        excluded_end_states=config.extraction.excluded_end_states,
        duration_unit=config.extraction.duration_unit,
        scale=config.distribution.scale,
        tie_policy=config.distribution.tie_policy,
        quantiles=config.quantiles,
        dot_plot=config.dot_plot,
        width_px=config.chart.width_px,
        box_label_gap_px=config.chart.box_label_gap_px,
        current_push_id=current_push_id,
    )


def default_charts(config: AppConfig, current_push_id: str | None = None) -> list[Chart]:
    return [TimelineChart(), distribution_chart(config, current_push_id=current_push_id)]
