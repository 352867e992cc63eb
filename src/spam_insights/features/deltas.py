from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from spam_insights.records import AggregationPoint


@dataclass(frozen=True)
class PeriodHighlights:
    current: AggregationPoint | None
    previous: AggregationPoint | None
    total_delta: float | None
    spam_rate_delta: float | None
    confidence_delta: float | None


def percent_change(current: float, previous: float | None) -> float | None:
    """Signed percentage change; ``None`` when there is no usable baseline."""
    if previous is None or previous == 0:
        return None
    return (current - previous) / previous * 100.0


def summarise_recent_window(
    points: Sequence[AggregationPoint],
) -> tuple[AggregationPoint | None, AggregationPoint | None]:
    if not points:
        return None, None
    if len(points) == 1:
        return points[-1], None
    return points[-1], points[-2]


def period_highlights(points: Sequence[AggregationPoint]) -> PeriodHighlights:
    current, previous = summarise_recent_window(points)
    if current is None or previous is None:
        return PeriodHighlights(
            current=current,
            previous=previous,
            total_delta=None,
            spam_rate_delta=None,
            confidence_delta=None,
        )
    return PeriodHighlights(
        current=current,
        previous=previous,
        total_delta=percent_change(current.total_requests, previous.total_requests),
        spam_rate_delta=percent_change(current.spam_rate, previous.spam_rate),
        confidence_delta=percent_change(
            current.average_confidence, previous.average_confidence
        ),
    )


def format_percentage(value: float | None, digits: int = 1) -> str:
    if value is None or math.isnan(value):
        return "–"
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.{digits}f}%"
