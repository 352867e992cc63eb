from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from spam_insights.preprocess.periods import parse_timestamp, resolve_period
from spam_insights.records import ClassificationRecord

TOP_TERMS_PER_TYPE = 3


@dataclass(frozen=True)
class MonthlySpamType:
    key: str
    month: str
    most_frequent_cluster: int
    frequency: int
    top_terms: tuple[str, ...]
    total_spam: int


def aggregate_monthly_spam_types(
    records: Iterable[ClassificationRecord],
) -> list[MonthlySpamType]:
    """Find the dominant spam cluster of each month.

    Only spam records carrying a cluster id are counted. Ties go to the
    cluster seen first within the month.
    """
    rows = []
    for order, record in enumerate(records):
        if not record.is_spam or record.cluster_id is None:
            continue
        period = resolve_period(parse_timestamp(record.timestamp), "month")
        rows.append(
            {
                "key": period.key,
                "month": period.label,
                "cluster_id": int(record.cluster_id),
                "top_terms": tuple(record.top_terms[:TOP_TERMS_PER_TYPE]),
                "order": order,
            }
        )
    if not rows:
        return []

    frame = pd.DataFrame(rows)
    per_cluster = (
        frame.groupby(["key", "cluster_id"], sort=False)
        .agg(
            month=("month", "first"),
            frequency=("order", "size"),
            first_seen=("order", "min"),
            top_terms=("top_terms", "first"),
        )
        .reset_index()
    )
    totals = per_cluster.groupby("key")["frequency"].sum()
    dominant = per_cluster.sort_values(
        ["key", "frequency", "first_seen"],
        ascending=[True, False, True],
        kind="mergesort",
    ).drop_duplicates(subset=["key"], keep="first")

    return [
        MonthlySpamType(
            key=str(row.key),
            month=str(row.month),
            most_frequent_cluster=int(row.cluster_id),
            frequency=int(row.frequency),
            top_terms=tuple(row.top_terms),
            total_spam=int(totals[row.key]),
        )
        for row in dominant.itertuples(index=False)
    ]
