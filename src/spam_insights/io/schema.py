from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd

from spam_insights.config import ColumnsConfig
from spam_insights.errors import InvalidRecord

SPAM_LABELS = {"spam", "true", "1", "yes", "y"}
HAM_LABELS = {"ham", "not_spam", "not spam", "false", "0", "no", "n"}


@dataclass(frozen=True)
class CanonicalColumns:
    timestamp: str = "timestamp"
    is_spam: str = "is_spam"
    confidence: str = "confidence"
    cluster_id: str = "cluster_id"
    top_terms: str = "top_terms"


def normalize_columns(df: pd.DataFrame, columns: ColumnsConfig) -> pd.DataFrame:
    """Rename source columns to the canonical names used by the loaders."""
    rename_map = {
        columns.timestamp: CanonicalColumns.timestamp,
        columns.is_spam: CanonicalColumns.is_spam,
        columns.confidence: CanonicalColumns.confidence,
    }
    missing = [source for source in rename_map if source not in df.columns]
    if missing:
        missing_str = ", ".join(missing)
        raise InvalidRecord(f"Missing required columns: {missing_str}")
    if columns.cluster_id and columns.cluster_id in df.columns:
        rename_map[columns.cluster_id] = CanonicalColumns.cluster_id
    return df.rename(columns=rename_map)


def coerce_label(value: Any) -> bool:
    """Map the loosely typed spam labels seen in service exports onto a boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    normalized = str(value).strip().lower()
    if normalized in SPAM_LABELS:
        return True
    if normalized in HAM_LABELS:
        return False
    raise InvalidRecord(f"Unrecognized spam label: {value!r}")
