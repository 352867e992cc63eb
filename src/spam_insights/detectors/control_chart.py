from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import fields

import numpy as np

from spam_insights.detectors.base import Detector, DetectorResult
from spam_insights.detectors.stats import trailing_window_stats
from spam_insights.features.aggregates import points_to_frame
from spam_insights.records import AggregationPoint, ControlChartPoint

LOGGER = logging.getLogger(__name__)

DEFAULT_WINDOW = 4
DEFAULT_MULTIPLIER = 2.0


def _aggregation_fields(point: AggregationPoint) -> dict:
    return {field.name: getattr(point, field.name) for field in fields(AggregationPoint)}


def compute_control_chart(
    points: Sequence[AggregationPoint],
    window: int = DEFAULT_WINDOW,
    multiplier: float = DEFAULT_MULTIPLIER,
) -> list[ControlChartPoint]:
    """Attach rolling mean, control bounds and anomaly flags to each period.

    Output is index-aligned with ``points``. Bounds stay ``None`` until the
    trailing window holds two observations, and a period is only flagged once
    the window holds ``window`` observations.
    """
    if window <= 0:
        raise ValueError("window must be >= 1")
    if multiplier < 0:
        raise ValueError("multiplier must be >= 0")
    if not points:
        return []

    totals = np.array([point.total_requests for point in points], dtype=float)
    sizes, means, stds = trailing_window_stats(totals, window)

    chart: list[ControlChartPoint] = []
    for point, size, mean, std in zip(points, sizes, means, stds):
        upper = float(mean + multiplier * std)
        lower = float(max(mean - multiplier * std, 0.0))
        has_bounds = size >= 2
        is_anomaly = bool(
            size >= window
            and (point.total_requests > upper or point.total_requests < lower)
        )
        chart.append(
            ControlChartPoint(
                **_aggregation_fields(point),
                rolling_mean=float(mean) if has_bounds else None,
                upper_bound=upper if has_bounds else None,
                lower_bound=lower if has_bounds else None,
                is_anomaly=is_anomaly,
            )
        )
    return chart


class ControlChartDetector(Detector):
    name = "control_chart"

    def __init__(self, window: int = DEFAULT_WINDOW, multiplier: float = DEFAULT_MULTIPLIER) -> None:
        self.window = window
        self.multiplier = multiplier

    def run(self, points: Sequence[AggregationPoint]) -> DetectorResult:
        chart = compute_control_chart(points, window=self.window, multiplier=self.multiplier)
        table = points_to_frame(chart)
        anomalies = [point for point in chart if point.is_anomaly]
        anomaly_table = points_to_frame(anomalies) if anomalies else table.iloc[0:0].copy()
        if anomalies:
            LOGGER.info(
                "Flagged %d of %d periods outside control bounds",
                len(anomalies),
                len(chart),
            )

        summary = {
            "n_periods": len(chart),
            "n_anomalies": len(anomalies),
            "window": int(self.window),
            "multiplier": float(self.multiplier),
            "max_total_requests": max((point.total_requests for point in chart), default=0),
            "anomalous_periods": [point.key for point in anomalies],
        }
        return DetectorResult(
            detector=self.name,
            summary=summary,
            tables={
                "control_chart": table,
                "control_chart_anomalies": anomaly_table,
            },
            points=chart,
        )
