from __future__ import annotations

import json
from pathlib import Path

import pytest

from spam_insights.config import AppConfig
from spam_insights.errors import InvalidRecord, InvalidTimestamp
from spam_insights.io.read import load_records
from spam_insights.io.schema import coerce_label


def _config(**columns: str) -> AppConfig:
    return AppConfig.model_validate({"columns": columns} if columns else {})


def test_load_records_normalizes_csv_columns_and_labels(tmp_path: Path) -> None:
    csv_path = tmp_path / "records.csv"
    csv_path.write_text(
        "\n".join(
            [
                "created_at,label,score,cluster,terms",
                "2024-03-01T10:00:00Z,spam,0.9,3,prize|claim|now",
                "2024-03-01T15:30:00Z,ham,0.2,,",
                "2024-03-02T09:00:00Z,not_spam,0.35,,",
            ]
        ),
        encoding="utf-8",
    )
    cfg = _config(timestamp="created_at", is_spam="label", confidence="score", cluster_id="cluster")

    records = load_records(csv_path, cfg)

    assert [record.is_spam for record in records] == [True, False, False]
    assert records[0].timestamp == "2024-03-01T10:00:00Z"
    assert records[0].confidence == pytest.approx(0.9)
    assert records[0].cluster_id == 3
    assert records[1].cluster_id is None
    assert records[0].top_terms == ()


def test_load_records_reads_service_prediction_envelope(tmp_path: Path) -> None:
    json_path = tmp_path / "history.json"
    json_path.write_text(
        json.dumps(
            {
                "predictions": [
                    {
                        "message": "WIN a prize now",
                        "timestamp": "2024-03-01T10:00:00Z",
                        "ensemble": {"is_spam": True, "confidence": 0.97, "prediction": "spam"},
                        "cluster": {
                            "cluster_id": 4,
                            "top_terms": [
                                {"term": "prize", "score": 0.4},
                                {"term": "win", "score": 0.3},
                            ],
                        },
                    },
                    {
                        "message": "see you soon",
                        "timestamp": "2024-03-02T11:00:00Z",
                        "ensemble": {"is_spam": False, "confidence": 0.12, "prediction": "ham"},
                        "cluster": None,
                    },
                ],
                "total_count": 2,
            }
        ),
        encoding="utf-8",
    )

    records = load_records(json_path, AppConfig())

    assert len(records) == 2
    assert records[0].is_spam is True
    assert records[0].cluster_id == 4
    assert records[0].top_terms == ("prize", "win")
    assert records[1].is_spam is False
    assert records[1].cluster_id is None
    assert records[1].confidence == pytest.approx(0.12)


def test_load_records_reads_flat_json_list_and_applies_limit(tmp_path: Path) -> None:
    json_path = tmp_path / "records.json"
    json_path.write_text(
        json.dumps(
            [
                {"timestamp": f"2024-01-0{day}T00:00:00", "is_spam": day % 2 == 0, "confidence": 0.5}
                for day in range(1, 6)
            ]
        ),
        encoding="utf-8",
    )
    cfg = AppConfig.model_validate({"input": {"limit": 3}})

    records = load_records(json_path, cfg)

    assert [record.timestamp for record in records] == [
        "2024-01-01T00:00:00",
        "2024-01-02T00:00:00",
        "2024-01-03T00:00:00",
    ]


def test_load_records_empty_json_list(tmp_path: Path) -> None:
    json_path = tmp_path / "records.json"
    json_path.write_text("[]", encoding="utf-8")

    assert load_records(json_path, AppConfig()) == []


@pytest.mark.parametrize(
    "payload",
    [
        {"data": [{"timestamp": "2024-01-01", "is_spam": True, "confidence": 0.5}]},
        {"timestamp": "2024-01-01", "is_spam": True, "confidence": 0.5},
        {"predictions": {"timestamp": "2024-01-01"}},
    ],
)
def test_load_records_rejects_json_objects_without_prediction_list(
    tmp_path: Path, payload: dict
) -> None:
    json_path = tmp_path / "records.json"
    json_path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(InvalidRecord, match="predictions"):
        load_records(json_path, AppConfig())


def test_load_records_raises_for_missing_columns(tmp_path: Path) -> None:
    csv_path = tmp_path / "records.csv"
    csv_path.write_text("timestamp,is_spam\n2024-01-01,spam\n", encoding="utf-8")

    with pytest.raises(InvalidRecord, match="Missing required columns: confidence"):
        load_records(csv_path, AppConfig())


def test_load_records_raises_for_invalid_timestamp(tmp_path: Path) -> None:
    csv_path = tmp_path / "records.csv"
    csv_path.write_text(
        "timestamp,is_spam,confidence\n2024-01-01,spam,0.5\nnot-a-date,ham,0.5\n",
        encoding="utf-8",
    )

    with pytest.raises(InvalidTimestamp):
        load_records(csv_path, AppConfig())


def test_load_records_raises_for_out_of_range_confidence(tmp_path: Path) -> None:
    csv_path = tmp_path / "records.csv"
    csv_path.write_text("timestamp,is_spam,confidence\n2024-01-01,spam,97\n", encoding="utf-8")

    with pytest.raises(InvalidRecord, match="confidence"):
        load_records(csv_path, AppConfig())


def test_load_records_rejects_unknown_file_type(tmp_path: Path) -> None:
    path = tmp_path / "records.xlsx"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported record file type"):
        load_records(path, AppConfig())


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, True),
        (False, False),
        (1, True),
        (0, False),
        ("Spam", True),
        (" ham ", False),
        ("not_spam", False),
        ("true", True),
        ("0", False),
    ],
)
def test_coerce_label(value: object, expected: bool) -> None:
    assert coerce_label(value) is expected


@pytest.mark.parametrize("value", ["maybe", 2, None, float("nan")])
def test_coerce_label_rejects_unknown_values(value: object) -> None:
    with pytest.raises(InvalidRecord, match="Unrecognized spam label"):
        coerce_label(value)
