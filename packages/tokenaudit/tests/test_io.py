"""Tests for the io module (token files, observed values and reports)."""

from pathlib import Path
import csv
import json

import pytest

from tokenaudit.io import (
    TokenFileError,
    load_token_tree,
    observed_value_from_record,
    parse_token_tree,
    read_observed_values,
    report_rows,
    write_report,
    write_resolved_tokens,
)
from tokenaudit.matcher import match_values
from tokenaudit.types import MatchReport, ObservedValue, ResolvedToken


class TestLoadTokenTree:
    """Tests for reading design-token files."""

    def test_load_valid_tree(self, tmp_path: Path):
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps({"Base": {"space": {"sm": {"value": "4px"}}}}))

        tree = load_token_tree(path)

        assert tree == {"Base": {"space": {"sm": {"value": "4px"}}}}

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "tokens.json"
        path.write_text("   \n")

        with pytest.raises(TokenFileError) as exc_info:
            load_token_tree(path)

        assert exc_info.value.message == "The uploaded file is empty"
        assert exc_info.value.path == str(path)

    def test_invalid_json(self):
        with pytest.raises(TokenFileError, match="Invalid JSON format in tokens file"):
            parse_token_tree("{not json")

    def test_non_object_json(self):
        with pytest.raises(TokenFileError, match="must be a JSON object"):
            parse_token_tree("[1, 2, 3]")

    def test_token_file_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_token_tree("")


class TestReadObservedValues:
    """Tests for reading observed values from files."""

    def test_read_json_array(self, tmp_path: Path):
        path = tmp_path / "values.json"
        path.write_text(json.dumps([
            {"type": "fill", "value": "#ffffff", "count": 3, "nodeIds": ["1:2"]},
            {"type": "spacing", "value": "8px"},
        ]))

        result = read_observed_values(path)

        assert result == [
            ObservedValue(type="fill", value="#ffffff", count=3, node_ids=["1:2"]),
            ObservedValue(type="spacing", value="8px"),
        ]

    def test_read_jsonl_skips_blank_lines(self, tmp_path: Path):
        path = tmp_path / "values.jsonl"
        path.write_text(
            '{"type": "border-radius", "value": "8px", "count": 5}\n'
            "\n"
            '{"type": "stroke", "value": "#000000", "locations": ["Card", "Button"]}\n'
        )

        result = read_observed_values(path)

        assert len(result) == 2
        assert result[0].count == 5
        assert result[1].locations == ["Card", "Button"]

    def test_read_csv_with_pipe_lists(self, tmp_path: Path):
        path = tmp_path / "values.csv"
        path.write_text(
            "type,value,count,node_ids\n"
            "padding,16px,2,1:2|1:3\n"
            "padding,,4,\n"
            "typography,Inter,,\n"
        )

        result = read_observed_values(path)

        assert result == [
            ObservedValue(type="padding", value="16px", count=2, node_ids=["1:2", "1:3"]),
            ObservedValue(type="typography", value="Inter"),
        ]

    def test_json_must_be_array(self, tmp_path: Path):
        path = tmp_path / "values.json"
        path.write_text(json.dumps({"type": "fill", "value": "#fff"}))

        with pytest.raises(ValueError, match="JSON array"):
            read_observed_values(path)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError, match="Unknown observed value type"):
            observed_value_from_record({"type": "shadow", "value": "0 1px 2px"})


def sample_report() -> MatchReport:
    tokens = {
        "space.sm": ResolvedToken(value="8px", is_reference=True, original_reference="{base.8}"),
    }
    observed = [
        ObservedValue(type="spacing", value="8px", count=4),
        ObservedValue(type="spacing", value="37px", count=1),
    ]
    return match_values(observed, tokens)


class TestWriteReport:
    """Tests for writing match reports."""

    def test_report_rows(self):
        rows = report_rows(sample_report())

        assert [r["status"] for r in rows] == ["matched", "unmatched"]
        assert rows[0]["token_name"] == "space.sm"
        assert rows[0]["confidence"] == 1.0
        assert rows[0]["original_reference"] == "{base.8}"
        assert rows[1]["value"] == "37px"
        assert rows[1]["token_name"] == ""

    def test_write_csv(self, tmp_path: Path):
        path = tmp_path / "report.csv"

        write_report(sample_report(), path)

        with path.open(newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 2
        assert rows[0]["status"] == "matched"
        assert rows[0]["match_type"] == "exact"
        assert rows[1]["status"] == "unmatched"
        assert rows[1]["count"] == "1"

    def test_write_jsonl(self, tmp_path: Path):
        path = tmp_path / "report.jsonl"

        write_report(sample_report(), path)

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert lines[0]["status"] == "matched"
        assert lines[0]["observed_value"] == "8px"
        assert lines[0]["alternatives"] == []
        assert lines[1] == {"status": "unmatched", "value": "37px", "type": "spacing", "count": 1}


def test_write_resolved_tokens(tmp_path: Path):
    path = tmp_path / "resolved.json"
    resolved = {
        "Semantic.radius.md": ResolvedToken(
            value="8px",
            is_reference=True,
            original_reference="{Base.radius.md}",
            reference_chain=["Base.radius.md"],
        )
    }

    write_resolved_tokens(resolved, path)

    data = json.loads(path.read_text())
    assert data["Semantic.radius.md"]["value"] == "8px"
    assert data["Semantic.radius.md"]["reference_chain"] == ["Base.radius.md"]
    assert data["Semantic.radius.md"]["unresolved_references"] == []


def test_numeric_zero_value_kept(tmp_path: Path):
    path = tmp_path / "values.json"
    path.write_text(json.dumps([{"type": "border-radius", "value": 0, "count": 4}]))

    result = read_observed_values(path)

    assert result == [ObservedValue(type="border-radius", value="0", count=4)]


def test_missing_value_skipped():
    assert observed_value_from_record({"type": "fill"}) is None
    assert observed_value_from_record({"type": "fill", "value": "  "}) is None
