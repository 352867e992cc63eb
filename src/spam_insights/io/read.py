from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from spam_insights.config import AppConfig
from spam_insights.errors import InvalidRecord
from spam_insights.io.schema import CanonicalColumns, coerce_label, normalize_columns
from spam_insights.preprocess.periods import parse_timestamp
from spam_insights.records import ClassificationRecord

LOGGER = logging.getLogger(__name__)

# Field paths of the prediction objects returned by the classification service.
SERVICE_FIELD_MAP = {
    "ensemble.is_spam": "is_spam",
    "ensemble.confidence": "confidence",
    "cluster.cluster_id": "cluster_id",
    "cluster.top_terms": "top_terms",
}


def _detect_format(path: Path, config: AppConfig) -> str:
    if config.input.format:
        return config.input.format
    if path.suffix.lower() == ".json":
        return "json"
    if path.suffix.lower() == ".csv":
        return "csv"
    raise ValueError(f"Unsupported record file type: {path.suffix}")


def _read_json_frame(path: Path, config: AppConfig) -> pd.DataFrame:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        if "predictions" not in payload:
            raise InvalidRecord("JSON object input must carry a 'predictions' list")
        payload = payload["predictions"]
    if not isinstance(payload, list):
        raise InvalidRecord("JSON input must be a list of predictions or a 'predictions' envelope")
    frame = pd.json_normalize(payload)

    canonical_targets = {
        "is_spam": config.columns.is_spam,
        "confidence": config.columns.confidence,
        "cluster_id": config.columns.cluster_id or CanonicalColumns.cluster_id,
        "top_terms": CanonicalColumns.top_terms,
    }
    rename_map = {
        source: canonical_targets[target]
        for source, target in SERVICE_FIELD_MAP.items()
        if source in frame.columns and canonical_targets[target] not in frame.columns
    }
    return frame.rename(columns=rename_map)


def _coerce_top_terms(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(term.strip() for term in value.split("|") if term.strip())
    if isinstance(value, (list, tuple)):
        terms = [item.get("term") if isinstance(item, dict) else item for item in value]
        return tuple(str(term) for term in terms if term)
    return ()


def _coerce_cluster_id(value: Any) -> int | None:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRecord(f"Invalid cluster id: {value!r}") from exc


def _frame_to_records(frame: pd.DataFrame) -> list[ClassificationRecord]:
    records: list[ClassificationRecord] = []
    has_cluster = CanonicalColumns.cluster_id in frame.columns
    has_terms = CanonicalColumns.top_terms in frame.columns
    for row in frame.to_dict(orient="records"):
        timestamp = row[CanonicalColumns.timestamp]
        # Fail on the offending row instead of deep inside an aggregation.
        parse_timestamp(timestamp)
        confidence = row[CanonicalColumns.confidence]
        try:
            confidence = float(confidence)
        except (TypeError, ValueError) as exc:
            raise InvalidRecord(f"Invalid confidence: {confidence!r}") from exc
        records.append(
            ClassificationRecord(
                timestamp=str(timestamp),
                is_spam=coerce_label(row[CanonicalColumns.is_spam]),
                confidence=confidence,
                cluster_id=_coerce_cluster_id(row[CanonicalColumns.cluster_id])
                if has_cluster
                else None,
                top_terms=_coerce_top_terms(row[CanonicalColumns.top_terms]) if has_terms else (),
            )
        )
    return records


def load_records(path: Path, config: AppConfig) -> list[ClassificationRecord]:
    """Load classification records from a CSV or JSON export."""
    fmt = _detect_format(path, config)
    if fmt == "json":
        frame = _read_json_frame(path, config)
    else:
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        frame = pd.read_csv(path, encoding="utf-8-sig", dtype={config.columns.timestamp: str})

    if frame.empty and not len(frame.columns):
        return []
    frame = normalize_columns(frame, config.columns)
    if config.input.limit is not None:
        frame = frame.head(config.input.limit)

    records = _frame_to_records(frame)
    LOGGER.info("Loaded %d classification records from %s", len(records), path)
    return records
