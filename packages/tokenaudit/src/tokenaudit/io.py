"""Token file loading, observed-value input and report output (JSON/JSONL/CSV)."""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from tokenaudit.types import PROPERTY_TYPES, MatchReport, ObservedValue, ResolvedToken

EMPTY_FILE = "The uploaded file is empty"
INVALID_JSON = "Invalid JSON format in tokens file"
INVALID_FILE_FORMAT = "Invalid tokens file format - must be a JSON object"


class TokenFileError(ValueError):
    """Raised when a token file cannot be used as a token tree."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None


def parse_token_tree(content: str, path: str | Path | None = None) -> dict[str, Any]:
    """Parse token JSON text, requiring a non-empty JSON object."""
    if not content.strip():
        raise TokenFileError(EMPTY_FILE, path)
    try:
        tree = json.loads(content)
    except json.JSONDecodeError as e:
        raise TokenFileError(INVALID_JSON, path) from e
    if not isinstance(tree, dict):
        raise TokenFileError(INVALID_FILE_FORMAT, path)
    return tree


def load_token_tree(path: str | Path) -> dict[str, Any]:
    """Read a design-token JSON file."""
    path = Path(path)
    return parse_token_tree(path.read_text(encoding="utf-8"), path)


def _split_list(raw: Any) -> list[str]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [str(item) for item in raw]
    return [part for part in str(raw).split("|") if part]


def observed_value_from_record(record: dict[str, Any]) -> ObservedValue | None:
    """Build an ObservedValue from a loose record; None when the value is blank."""
    raw_value = record.get("value")
    if raw_value is None:
        return None
    value = str(raw_value).strip()
    if not value:
        return None
    value_type = str(record.get("type") or "").strip()
    if value_type not in PROPERTY_TYPES:
        raise ValueError(f"Unknown observed value type: {value_type!r}")

    count = record.get("count")
    return ObservedValue(
        type=value_type,
        value=value,
        count=int(count) if count not in (None, "") else 1,
        locations=_split_list(record.get("locations")),
        node_ids=_split_list(record.get("node_ids", record.get("nodeIds"))),
    )


def read_observed_values(path: str | Path) -> list[ObservedValue]:
    """Read observed values from a JSON array, JSONL or CSV file."""
    path = Path(path)

    if path.suffix == ".jsonl":
        records = _read_jsonl(path)
    elif path.suffix == ".json":
        records = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(records, list):
            raise ValueError(f"Expected a JSON array of observed values in {path}")
    else:
        records = _read_csv(path)

    values: list[ObservedValue] = []
    for record in records:
        observed = observed_value_from_record(record)
        if observed is not None:
            values.append(observed)
    return values


def _read_jsonl(path: Path) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    with path.open(encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            records.append(json.loads(line))
    return records


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def report_rows(report: MatchReport) -> list[dict[str, Any]]:
    """Flatten a report into one row per observed value, matched or not."""
    rows: list[dict[str, Any]] = []
    for m in report.token_matches:
        rows.append({
            "status": "matched",
            "type": m.observed_type,
            "value": m.observed_value,
            "count": m.count,
            "token_name": m.token_name,
            "full_token_path": m.full_token_path,
            "token_value": m.token_value,
            "confidence": round(m.confidence, 4),
            "match_type": m.match_type,
            "is_semantic_token": m.is_semantic_token,
            "original_reference": m.original_reference or "",
            "suggestions": "|".join(m.suggestions),
        })
    for u in report.unmatched_values:
        rows.append({
            "status": "unmatched",
            "type": u.type,
            "value": u.value,
            "count": u.count,
            "token_name": "",
            "full_token_path": "",
            "token_value": "",
            "confidence": "",
            "match_type": "",
            "is_semantic_token": "",
            "original_reference": "",
            "suggestions": "",
        })
    return rows


def write_report(report: MatchReport, path: str | Path) -> None:
    """Write a match report to CSV or JSONL."""
    path = Path(path)

    if path.suffix == ".jsonl":
        _write_jsonl(report, path)
    else:
        _write_csv(report, path)


def _write_csv(report: MatchReport, path: Path) -> None:
    rows = report_rows(report)
    fieldnames = [
        "status", "type", "value", "count", "token_name", "full_token_path",
        "token_value", "confidence", "match_type", "is_semantic_token",
        "original_reference", "suggestions",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def _write_jsonl(report: MatchReport, path: Path) -> None:
    with path.open("w", encoding="utf-8") as f:
        for m in report.token_matches:
            record = {"status": "matched", **asdict(m)}
            f.write(json.dumps(record) + "\n")
        for u in report.unmatched_values:
            record = {"status": "unmatched", **asdict(u)}
            f.write(json.dumps(record) + "\n")


def write_resolved_tokens(resolved: dict[str, ResolvedToken], path: str | Path) -> None:
    """Write a resolved-token map as a JSON object keyed by full path."""
    path = Path(path)
    data = {name: asdict(token) for name, token in resolved.items()}
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
