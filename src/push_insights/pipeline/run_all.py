from __future__ import annotations

from pathlib import Path

from push_insights.charts.registry import default_charts
from push_insights.config import AppConfig
from push_insights.pipeline.run_charts import load_configured_records, run_charts


def run_all(
    records_path: Path | None,
    out_dir: Path,
    config: AppConfig,
    *,
    current_push_id: str | None = None,
) -> Path:
    records = load_configured_records(records_path=records_path, config=config)
    run_charts(
        records=records,
        charts=default_charts(config, current_push_id=current_push_id),
        out_dir=out_dir,
        config=config,
    )
    return out_dir
