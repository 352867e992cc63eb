from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

Granularity = Literal["day", "week", "month"]
GRANULARITIES: tuple[Granularity, ...] = ("day", "week", "month")

SOURCE_ENV = "SPAM_INSIGHTS_SOURCE"


class ColumnsConfig(BaseModel):
    timestamp: str = "timestamp"
    is_spam: str = "is_spam"
    confidence: str = "confidence"
    cluster_id: str | None = "cluster_id"


class AggregationConfig(BaseModel):
    granularity: Granularity = "day"


class ControlChartConfig(BaseModel):
    window: int = Field(default=4, ge=1)
    multiplier: float = Field(default=2.0, ge=0.0)


class InputConfig(BaseModel):
    format: Literal["csv", "json"] | None = None
    source_file: str | None = None
    limit: int | None = Field(default=None, ge=1)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    control_chart: ControlChartConfig = Field(default_factory=ControlChartConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path | None = None) -> AppConfig:
    """Load YAML config; a missing default file yields built-in defaults."""
    if path is None or (path == DEFAULT_CONFIG_PATH and not path.exists()):
        config = AppConfig()
        base_dir = Path.cwd()
    else:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        config = AppConfig.model_validate(data)
        base_dir = path.resolve().parent

    config.input.source_file = _resolve_optional_path(
        config.input.source_file, base_dir
    ) or _resolve_optional_path(os.getenv(SOURCE_ENV), Path.cwd())
    return config
