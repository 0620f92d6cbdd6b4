from __future__ import annotations

from pathlib import Path

import typer

from push_insights.charts.registry import distribution_chart
from push_insights.charts.timeline import TimelineChart
from push_insights.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from push_insights.io.records import PushRecord
from push_insights.logging import configure_logging
from push_insights.paths import build_output_paths
from push_insights.pipeline.run_all import run_all
from push_insights.pipeline.run_charts import load_configured_records, run_charts

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _require_records(records: Path | None, cfg: AppConfig) -> list[PushRecord]:
    if records is None and not cfg.input.records_path:
        raise typer.BadParameter(
            "Missing --records. Required unless input.records_path is configured "
            "or PUSH_INSIGHTS_RECORDS_PATH is set."
        )
    return load_configured_records(records_path=records, config=cfg)


@app.command()
def timeline(
    records: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """Pack pushes into non-overlapping timeline rows."""
    configure_logging()
    cfg = _load_app_config(config)
    push_records = _require_records(records, cfg)
    paths = build_output_paths(out)
    results = run_charts(push_records, [TimelineChart()], out_dir=paths.root, config=cfg)
    typer.echo(f"Timeline complete. Rows: {results['timeline'].summary['row_count']}")


@app.command()
def distribution(
    records: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    push_id: str | None = typer.Option(
        None, help="Push handle to position against the historical distribution."
    ),
) -> None:
    """Build the duration CDF, quantile markers and dot plot offsets."""
    configure_logging()
    cfg = _load_app_config(config)
    push_records = _require_records(records, cfg)
    paths = build_output_paths(out)
    results = run_charts(
        push_records,
        [distribution_chart(cfg, current_push_id=push_id)],
        out_dir=paths.root,
        config=cfg,
    )
    summary = results["distribution"].summary
    typer.echo(
        f"Distribution complete. Completed pushes: {summary['completed_count']} "
        f"({summary['unit']})"
    )


@app.command()
def compare(
    push_id: str = typer.Option(..., help="Push handle to compare."),
    records: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """Print where one push's duration falls among the completed pushes."""
    configure_logging()
    cfg = _load_app_config(config)
    push_records = _require_records(records, cfg)
    result = distribution_chart(cfg, current_push_id=push_id).build(push_records)
    comparison = result.summary["current_push"]
    if comparison is None:
        typer.echo(f"Push {push_id} has no completed duration to compare.")
        raise typer.Exit(code=1)
    typer.echo(
        f"Push {push_id}: {comparison['duration']:.2f} {result.summary['unit']}, "
        f"cumulative probability {comparison['probability']:g}"
    )


@app.command("run-all")
def run_all_command(
    records: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    push_id: str | None = typer.Option(
        None, help="Push handle to position against the historical distribution."
    ),
) -> None:
    """Build timeline and distribution data plus figures in one command."""
    configure_logging()
    cfg = _load_app_config(config)
    if records is None and not cfg.input.records_path:
        raise typer.BadParameter(
            "Missing --records. Required unless input.records_path is configured "
            "or PUSH_INSIGHTS_RECORDS_PATH is set."
        )
    output_dir = run_all(records_path=records, out_dir=out, config=cfg, current_push_id=push_id)
    typer.echo(f"Run complete. Outputs: {output_dir}")


if __name__ == "__main__":  # pragma: no cover
    app()
