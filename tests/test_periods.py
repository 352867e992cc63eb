from __future__ import annotations

from datetime import date, datetime

import pytest

from spam_insights.errors import InvalidTimestamp
from spam_insights.preprocess.periods import parse_timestamp, resolve_period


def test_resolve_period_day_month_keys_and_labels() -> None:
    timestamp = parse_timestamp("2024-03-05T14:20:00Z")

    day = resolve_period(timestamp, "day")
    assert day.key == "2024-03-05"
    assert day.label == "Mar 5"
    assert day.start == date(2024, 3, 5)

    month = resolve_period(timestamp, "month")
    assert month.key == "2024-03"
    assert month.label == "Mar 2024"
    assert month.start == date(2024, 3, 1)


def test_resolve_period_week_starts_on_monday() -> None:
    # 2024-03-07 is a Thursday in ISO week 10.
    week = resolve_period(parse_timestamp("2024-03-07T08:00:00"), "week")

    assert week.key == "2024-W10"
    assert week.start == date(2024, 3, 4)
    assert week.label == "Mar 4 • W10"


def test_week_keys_use_iso_year_across_new_year() -> None:
    sunday = resolve_period(parse_timestamp("2024-12-29T12:00:00"), "week")
    tuesday = resolve_period(parse_timestamp("2024-12-31T12:00:00"), "week")
    next_week = resolve_period(parse_timestamp("2025-01-07T12:00:00"), "week")

    assert sunday.key == "2024-W52"
    assert tuesday.key == "2025-W01"
    assert tuesday.label == "Dec 30 • W01"
    assert sorted([next_week.key, tuesday.key, sunday.key]) == [
        sunday.key,
        tuesday.key,
        next_week.key,
    ]


def test_keys_sort_chronologically_for_every_granularity() -> None:
    stamps = [
        "2023-11-30T23:59:00",
        "2023-12-01T00:00:00",
        "2024-01-01T00:00:00",
        "2024-02-29T10:00:00",
        "2024-10-10T10:00:00",
    ]
    for granularity in ("day", "week", "month"):
        keys = [resolve_period(parse_timestamp(value), granularity).key for value in stamps]
        assert keys == sorted(keys)


def test_parse_timestamp_keeps_encoded_offset() -> None:
    timestamp = parse_timestamp("2024-03-01T23:30:00-05:00")

    assert resolve_period(timestamp, "day").key == "2024-03-01"


def test_parse_timestamp_accepts_datetime_instances() -> None:
    assert parse_timestamp(datetime(2024, 5, 1, 9, 0)).day == 1


@pytest.mark.parametrize(
    "value", ["", "   ", "not a timestamp", "2024-13-45", "now", "today", " Today ", None, 42]
)
def test_parse_timestamp_rejects_invalid_values(value: object) -> None:
    with pytest.raises(InvalidTimestamp):
        parse_timestamp(value)  # type: ignore[arg-type]


def test_resolve_period_rejects_unknown_granularity() -> None:
    with pytest.raises(ValueError, match="Unsupported granularity"):
        resolve_period(parse_timestamp("2024-01-01"), "year")  # type: ignore[arg-type]
