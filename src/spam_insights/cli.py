from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from spam_insights.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from spam_insights.detectors.control_chart import compute_control_chart
from spam_insights.errors import InvalidRecord
from spam_insights.explain.highlight import highlight_segments, render_segments
from spam_insights.explain.indicators import analyze_indicators
from spam_insights.features.aggregates import aggregate_requests, points_to_frame
from spam_insights.features.deltas import format_percentage, period_highlights
from spam_insights.io.read import load_records
from spam_insights.logging import configure_logging
from spam_insights.pipeline.run_all import run_all
from spam_insights.records import ClassificationRecord

app = typer.Typer(no_args_is_help=True, add_completion=False)


class GranularityOption(str, Enum):
    day = "day"
    week = "week"
    month = "month"


CHART_COLUMNS = [
    "key",
    "label",
    "total_requests",
    "rolling_mean",
    "lower_bound",
    "upper_bound",
    "is_anomaly",
]


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _resolve_source(source: Path | None, cfg: AppConfig) -> Path:
    if source is not None:
        return source
    if cfg.input.source_file:
        return Path(cfg.input.source_file)
    raise typer.BadParameter(
        "Missing --source. Pass a CSV/JSON export or set input.source_file in the config."
    )


def _granularity(option: GranularityOption | None, cfg: AppConfig) -> str:
    return option.value if option is not None else cfg.aggregation.granularity


def _load(source: Path | None, cfg: AppConfig) -> list[ClassificationRecord]:
    try:
        return load_records(_resolve_source(source, cfg), cfg)
    except InvalidRecord as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def aggregate(
    source: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    granularity: GranularityOption | None = typer.Option(None),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=False),
) -> None:
    """Summarise classification records per period."""
    configure_logging()
    cfg = _load_app_config(config)
    records = _load(source, cfg)
    points = aggregate_requests(records, _granularity(granularity, cfg))
    if not points:
        typer.echo("No records.")
        return
    typer.echo(points_to_frame(points).to_string(index=False))

    highlights = period_highlights(points)
    typer.echo(
        "Latest vs previous period: "
        f"requests {format_percentage(highlights.total_delta)}, "
        f"spam rate {format_percentage(highlights.spam_rate_delta)}, "
        f"confidence {format_percentage(highlights.confidence_delta)}"
    )


@app.command("control-chart")
def control_chart(
    source: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    granularity: GranularityOption | None = typer.Option(None),
    window: int | None = typer.Option(None, min=1, help="Trailing window size."),
    multiplier: float | None = typer.Option(
        None, min=0.0, help="Standard deviation multiplier."
    ),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=False),
) -> None:
    """Flag periods whose volume falls outside rolling control bounds."""
    configure_logging()
    cfg = _load_app_config(config)
    records = _load(source, cfg)
    points = aggregate_requests(records, _granularity(granularity, cfg))
    chart = compute_control_chart(
        points,
        window=window or cfg.control_chart.window,
        multiplier=cfg.control_chart.multiplier if multiplier is None else multiplier,
    )
    if not chart:
        typer.echo("No records.")
        return
    typer.echo(points_to_frame(chart)[CHART_COLUMNS].to_string(index=False))
    anomalies = [point.key for point in chart if point.is_anomaly]
    typer.echo(f"Anomalous periods: {', '.join(anomalies) if anomalies else 'none'}")


@app.command()
def explain(message: str = typer.Argument(..., help="Message text to explain.")) -> None:
    """List suspicious-content indicators and highlight them in the message."""
    configure_logging()
    indicators = analyze_indicators(message)
    if not indicators:
        typer.echo("No clear spam indicators found.")
        return

    typer.echo(f"Detected indicators ({len(indicators)}):")
    for indicator in indicators:
        typer.echo(f"- {indicator.category}: {indicator.explanation}")
        typer.echo(f"  matches: {', '.join(indicator.matches)}")
    typer.echo("")
    typer.echo(render_segments(highlight_segments(message, indicators)))


@app.command("run-all")
def run_all_command(
    source: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=False),
) -> None:
    """Write aggregation, control-chart and summary outputs to out/."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved = _resolve_source(source, cfg)
    try:
        outputs = run_all(source=resolved, out_dir=out, config=cfg)
    except InvalidRecord as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Run complete. Summary: {outputs['summary']}")


if __name__ == "__main__":
    app()
