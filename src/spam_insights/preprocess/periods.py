from __future__ import annotations

import re
from datetime import datetime, timedelta

import pandas as pd

from spam_insights.config import Granularity
from spam_insights.errors import InvalidTimestamp
from spam_insights.records import PeriodKey

# Calendar date first; rejects relative keywords such as "now" or "today".
ISO_DATE_PREFIX = re.compile(r"^\d{4}-?\d{2}-?\d{2}")


def parse_timestamp(value: str | datetime) -> pd.Timestamp:
    """Parse an ISO-8601 timestamp, keeping whatever offset it already encodes."""
    if isinstance(value, datetime):
        return pd.Timestamp(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimestamp(value)
    text = value.strip()
    if not ISO_DATE_PREFIX.match(text):
        raise InvalidTimestamp(value)
    try:
        parsed = pd.to_datetime(text, format="ISO8601")
    except (TypeError, ValueError) as exc:
        raise InvalidTimestamp(value) from exc
    if pd.isna(parsed):
        raise InvalidTimestamp(value)
    return parsed


def resolve_period(timestamp: datetime, granularity: Granularity) -> PeriodKey:
    day = timestamp.date()
    if granularity == "day":
        return PeriodKey(
            key=day.isoformat(),
            label=f"{day:%b} {day.day}",
            start=day,
        )
    if granularity == "week":
        # ISO year keeps late-December/early-January weeks in order.
        iso_year, iso_week, _ = day.isocalendar()
        week_start = day - timedelta(days=day.weekday())
        return PeriodKey(
            key=f"{iso_year:04d}-W{iso_week:02d}",
            label=f"{week_start:%b} {week_start.day} • W{iso_week:02d}",
            start=week_start,
        )
    if granularity == "month":
        return PeriodKey(
            key=f"{day.year:04d}-{day.month:02d}",
            label=day.strftime("%b %Y"),
            start=day.replace(day=1),
        )
    raise ValueError(f"Unsupported granularity: {granularity}")
