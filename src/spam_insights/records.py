from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from spam_insights.errors import InvalidRecord


@dataclass(frozen=True)
class ClassificationRecord:
    timestamp: str
    is_spam: bool
    confidence: float
    cluster_id: int | None = None
    top_terms: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.is_spam, bool):
            raise InvalidRecord(f"is_spam must be a boolean, got {self.is_spam!r}")
        try:
            confidence = float(self.confidence)
        except (TypeError, ValueError) as exc:
            raise InvalidRecord(f"confidence must be numeric, got {self.confidence!r}") from exc
        if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
            raise InvalidRecord(f"confidence must be within [0, 1], got {self.confidence!r}")


@dataclass(frozen=True)
class PeriodKey:
    key: str
    label: str
    start: date


@dataclass(frozen=True)
class AggregationPoint:
    key: str
    label: str
    start: date
    total_requests: int
    spam_count: int
    ham_count: int
    average_confidence: float
    spam_rate: float


@dataclass(frozen=True)
class ControlChartPoint(AggregationPoint):
    rolling_mean: float | None
    upper_bound: float | None
    lower_bound: float | None
    is_anomaly: bool
