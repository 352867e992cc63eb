from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import asdict, fields, is_dataclass
from typing import Any

import pandas as pd

from spam_insights.config import GRANULARITIES, Granularity
from spam_insights.preprocess.periods import parse_timestamp, resolve_period
from spam_insights.records import AggregationPoint, ClassificationRecord

LOGGER = logging.getLogger(__name__)

AGGREGATION_COLUMNS = [field.name for field in fields(AggregationPoint)]


def _period_rows(
    records: Iterable[ClassificationRecord],
    granularity: Granularity,
) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for record in records:
        timestamp = parse_timestamp(record.timestamp)
        period = resolve_period(timestamp, granularity)
        rows.append(
            {
                "key": period.key,
                "label": period.label,
                "start": timestamp.date(),
                "is_spam": bool(record.is_spam),
                "confidence": float(record.confidence),
            }
        )
    return rows


def build_period_counts(
    records: Iterable[ClassificationRecord],
    granularity: Granularity,
) -> pd.DataFrame:
    """Fold records into one row per period key, sorted ascending by key."""
    rows = _period_rows(records, granularity)
    if not rows:
        return pd.DataFrame(columns=AGGREGATION_COLUMNS)

    frame = pd.DataFrame(rows)
    grouped = (
        frame.groupby("key", sort=True)
        .agg(
            label=("label", "first"),
            start=("start", "first"),
            total_requests=("is_spam", "size"),
            spam_count=("is_spam", "sum"),
            confidence_sum=("confidence", "sum"),
        )
        .reset_index()
    )
    grouped["total_requests"] = grouped["total_requests"].astype(int)
    grouped["spam_count"] = grouped["spam_count"].astype(int)
    grouped["ham_count"] = grouped["total_requests"] - grouped["spam_count"]

    nonzero_total = grouped["total_requests"] > 0
    grouped["average_confidence"] = (
        grouped["confidence_sum"] / grouped["total_requests"]
    ).where(nonzero_total, 0.0)
    grouped["spam_rate"] = (grouped["spam_count"] / grouped["total_requests"]).where(
        nonzero_total, 0.0
    )
    LOGGER.debug(
        "Aggregated %d records into %d %s periods", len(frame), len(grouped), granularity
    )
    return grouped[AGGREGATION_COLUMNS]


def aggregate_requests(
    records: Iterable[ClassificationRecord],
    granularity: Granularity,
) -> list[AggregationPoint]:
    grouped = build_period_counts(records, granularity)
    return [
        AggregationPoint(
            key=str(row.key),
            label=str(row.label),
            start=row.start,
            total_requests=int(row.total_requests),
            spam_count=int(row.spam_count),
            ham_count=int(row.ham_count),
            average_confidence=float(row.average_confidence),
            spam_rate=float(row.spam_rate),
        )
        for row in grouped.itertuples(index=False)
    ]


def aggregate_requests_by_granularity(
    records: Iterable[ClassificationRecord],
) -> dict[Granularity, list[AggregationPoint]]:
    snapshot = list(records)
    return {
        granularity: aggregate_requests(snapshot, granularity) for granularity in GRANULARITIES
    }


def points_to_frame(
    points: Sequence[Any],
    columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Tabulate a sequence of point dataclasses, one row per point."""
    if not points:
        return pd.DataFrame(columns=list(columns or AGGREGATION_COLUMNS))
    if not all(is_dataclass(point) for point in points):
        raise TypeError("points_to_frame expects dataclass instances")
    return pd.DataFrame([asdict(point) for point in points])
