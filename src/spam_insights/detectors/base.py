from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

from spam_insights.records import AggregationPoint


@dataclass(frozen=True)
class DetectorResult:
    detector: str
    summary: dict[str, Any]
    tables: dict[str, pd.DataFrame]
    points: list[Any]


class Detector:
    name: str

    def run(self, points: Sequence[AggregationPoint]) -> DetectorResult:
        raise NotImplementedError
