from __future__ import annotations

import logging
from dataclasses import asdict, fields
from pathlib import Path

from spam_insights.config import AppConfig
from spam_insights.detectors.control_chart import ControlChartDetector
from spam_insights.features.aggregates import aggregate_requests, points_to_frame
from spam_insights.features.cluster_trends import MonthlySpamType, aggregate_monthly_spam_types
from spam_insights.features.deltas import period_highlights
from spam_insights.io.read import load_records
from spam_insights.io.write import write_summary, write_table
from spam_insights.paths import build_output_paths

LOGGER = logging.getLogger(__name__)

MONTHLY_COLUMNS = [field.name for field in fields(MonthlySpamType)]


def run_all(source: Path, out_dir: Path, config: AppConfig) -> dict[str, Path]:
    """Load records, build period summaries and write tables plus a JSON summary."""
    records = load_records(source, config)
    granularity = config.aggregation.granularity
    paths = build_output_paths(out_dir)
    fmt = config.outputs.tables_format

    points = aggregate_requests(records, granularity)
    detector = ControlChartDetector(
        window=config.control_chart.window,
        multiplier=config.control_chart.multiplier,
    )
    result = detector.run(points)
    highlights = period_highlights(points)
    monthly_types = aggregate_monthly_spam_types(records)

    monthly_table = points_to_frame(monthly_types, columns=MONTHLY_COLUMNS)
    monthly_table["top_terms"] = monthly_table["top_terms"].map("|".join)

    outputs: dict[str, Path] = {
        "aggregation": write_table(
            points_to_frame(points), paths.tables / f"aggregation_{granularity}", fmt
        ),
        "monthly_spam_types": write_table(
            monthly_table, paths.tables / "monthly_spam_types", fmt
        ),
    }
    for table_name, table in result.tables.items():
        outputs[table_name] = write_table(table, paths.tables / table_name, fmt)

    summary = {
        "n_records": len(records),
        "granularity": granularity,
        result.detector: result.summary,
        "highlights": {
            "current_period": highlights.current.key if highlights.current else None,
            "previous_period": highlights.previous.key if highlights.previous else None,
            "total_delta": highlights.total_delta,
            "spam_rate_delta": highlights.spam_rate_delta,
            "confidence_delta": highlights.confidence_delta,
        },
        "monthly_spam_types": [asdict(item) for item in monthly_types],
    }
    outputs["summary"] = write_summary(summary, paths.summary / "summary.json")
    LOGGER.info("Wrote %d outputs to %s", len(outputs), out_dir)
    return outputs
