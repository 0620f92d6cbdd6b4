from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

PERCENT_SCALE = 100.0
FRACTION_SCALE = 1.0


class InputConfig(BaseModel):
    records_path: str | None = None
    format: Literal["auto", "json", "yaml", "csv"] = "auto"


class ExtractionConfig(BaseModel):
    completed_state: int = Field(default=5, ge=1)
    excluded_end_states: list[int] = Field(default_factory=lambda: [14, 17, 18, 19])
    duration_unit: Literal["auto", "seconds", "minutes", "hours", "days"] = "auto"


class DistributionConfig(BaseModel):
    probability_scale: Literal["percent", "fraction"] = "percent"
    tie_policy: Literal["max_rank", "ordinal"] = "max_rank"

    @property
    def scale(self) -> float:
        return PERCENT_SCALE if self.probability_scale == "percent" else FRACTION_SCALE


class QuantileConfig(BaseModel):
    """Quantile marker declutter settings, always expressed in percent."""

    probabilities: list[float] = Field(default_factory=lambda: [10.0, 50.0, 90.0])
    pixel_threshold: float = Field(default=15.0, ge=0.0)
    step: float = Field(default=1.0, gt=0.0, le=50.0)
    min_bound: float = Field(default=1.0, ge=0.0, le=100.0)
    max_bound: float = Field(default=99.0, ge=0.0, le=100.0)
    max_iterations: int = Field(default=100, ge=0)

    @model_validator(mode="after")
    def _check_probabilities(self) -> QuantileConfig:
        if len(self.probabilities) != 3:
            raise ValueError("quantiles.probabilities must list exactly [low, mid, high]")
        low, mid, high = self.probabilities
        if not 0.0 <= low <= mid <= high <= 100.0:
            raise ValueError("quantiles.probabilities must be ordered within [0, 100]")
        if self.min_bound > self.max_bound:
            raise ValueError("quantiles.min_bound must be <= quantiles.max_bound")
        return self

    def scaled(self, scale: float) -> dict[str, object]:
        """Keyword arguments for the marker generator on a table of the given scale."""
        factor = scale / PERCENT_SCALE
        return {
            "probabilities": [value * factor for value in self.probabilities],
            "pixel_threshold": self.pixel_threshold,
            "step": self.step * factor,
            "min_bound": self.min_bound * factor,
            "max_bound": self.max_bound * factor,
            "max_iterations": self.max_iterations,
        }


class DotPlotConfig(BaseModel):
    radius: float = Field(default=2.5, gt=0.0)
    dense_radius: float = Field(default=1.4, gt=0.0)
    dense_threshold: int = Field(default=100, ge=1)
    epsilon: float = Field(default=1e-6, gt=0.0)


class ChartConfig(BaseModel):
    width_px: float = Field(default=800.0, gt=0.0)
    height_px: float = Field(default=400.0, gt=0.0)
    box_label_gap_px: float = Field(default=8.0, ge=0.0)


class OutputsConfig(BaseModel):
    tables_format: Literal["parquet", "csv"] = "parquet"
    figures_format: str = "png"
    render_figures: bool = True


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: InputConfig = Field(default_factory=InputConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    distribution: DistributionConfig = Field(default_factory=DistributionConfig)
    quantiles: QuantileConfig = Field(default_factory=QuantileConfig)
    dot_plot: DotPlotConfig = Field(default_factory=DotPlotConfig)
    chart: ChartConfig = Field(default_factory=ChartConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")
RECORDS_PATH_ENV = "PUSH_INSIGHTS_RECORDS_PATH"


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.input.records_path = _resolve_optional_path(
        config.input.records_path, base_dir
    ) or os.getenv(RECORDS_PATH_ENV)
    return config
