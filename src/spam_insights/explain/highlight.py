from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from spam_insights.explain.indicators import IndicatorMatch


@dataclass(frozen=True)
class HighlightSegment:
    text: str
    highlighted: bool = False


def build_highlight_pattern(matches: Iterable[str]) -> re.Pattern[str] | None:
    """Compile an alternation of escaped match strings, longest first.

    Longest-first ordering makes a phrase win over any shorter match it
    contains when both start at the same position.
    """
    unique = {match for match in matches if match}
    if not unique:
        return None
    ordered = sorted(unique, key=lambda value: (-len(value), value))
    return re.compile("|".join(re.escape(value) for value in ordered), re.IGNORECASE)


def highlight_segments(
    message: str,
    indicators: Sequence[IndicatorMatch],
) -> list[HighlightSegment]:
    """Split a message into plain and highlighted runs covering it exactly once."""
    pattern = build_highlight_pattern(
        match for indicator in indicators for match in indicator.matches
    )
    if pattern is None:
        return [HighlightSegment(text=message)]

    segments: list[HighlightSegment] = []
    cursor = 0
    for found in pattern.finditer(message):
        if found.start() > cursor:
            segments.append(HighlightSegment(text=message[cursor : found.start()]))
        segments.append(HighlightSegment(text=found.group(0), highlighted=True))
        cursor = found.end()
    if cursor < len(message):
        segments.append(HighlightSegment(text=message[cursor:]))
    return segments


def render_segments(
    segments: Sequence[HighlightSegment],
    marker: tuple[str, str] = ("[", "]"),
) -> str:
    opening, closing = marker
    return "".join(
        f"{opening}{segment.text}{closing}" if segment.highlighted else segment.text
        for segment in segments
    )
