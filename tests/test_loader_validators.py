"""Tests for payload validation and the JSON data loader."""

import json

import pytest

from proplab.data.loader import DataLoader, PayloadError
from proplab.data.validators import (
    extract_rows,
    summarize_errors,
    validate_gamelogs_payload,
    validate_market_payload,
)


def _write(tmp_path, name, payload):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return str(path)


class TestValidators:
    def test_extract_rows(self):
        assert extract_rows([1, 2], ("gamelogs",)) == [1, 2]
        assert extract_rows({"games": [1]}, ("gamelogs", "games")) == [1]
        assert extract_rows({"gamelogs": "nope"}, ("gamelogs",)) == []
        assert extract_rows(None, ("gamelogs",)) == []

    def test_valid_gamelogs(self):
        payload = {"gamelogs": [{"game_date": "2024-10-15", "player_team_abbrev": "TOR"}]}
        assert validate_gamelogs_payload(payload) == []

    def test_gamelog_errors(self):
        errors = validate_gamelogs_payload([{"player_team": "TOR"}, "x", {"date": "2024-10-15"}])
        assert errors == [
            "gamelogs[0] missing game_date",
            "gamelogs[1] must be an object",
            "gamelogs[2] missing player team",
        ]

    def test_empty_gamelogs(self):
        assert validate_gamelogs_payload({}) == [
            "gamelog payload must be a non-empty list or include a 'gamelogs' list"
        ]

    def test_market_errors(self):
        errors = validate_market_payload({"props": [{"prop": "SOG", "side": "Over", "line": "x"}, {}]})
        assert "props[0] missing/invalid numeric field 'line'" in errors
        assert "props[1] missing prop name" in errors
        assert "props[1] missing side" in errors

    def test_summarize_errors(self):
        errors = [f"e{i}" for i in range(7)]
        assert summarize_errors(errors, limit=2) == "e0; e1 (+5 more)"
        assert summarize_errors(["only"]) == "only"


class TestDataLoader:
    def test_load_gamelogs(self, tmp_path):
        path = _write(
            tmp_path,
            "gamelogs.json",
            {"gamelogs": [
                {"game_id": "1", "game_date": "2024-10-15", "player_team_abbrev": "TOR", "goals": 1},
                {"game_id": "2", "game_date": "2024-10-17", "player_team_abbrev": "TOR", "goals": "x"},
            ]},
        )
        records = DataLoader.load_gamelogs(path)
        assert [r.game_id for r in records] == ["1", "2"]
        assert records[1].goals == 0.0

    def test_load_gamelogs_strict(self, tmp_path):
        path = _write(tmp_path, "gamelogs.json", [{"game_date": "2024-10-15", "player_team": "TOR", "extra": 1}])
        with pytest.raises(ValueError):
            DataLoader.load_gamelogs(path, strict=True)

    def test_rows_with_problems_still_load(self, tmp_path):
        path = _write(tmp_path, "gamelogs.json", [{"goals": 2}])
        assert DataLoader.load_gamelogs(path)[0].goals == 2.0

    def test_empty_payload_raises(self, tmp_path):
        path = _write(tmp_path, "gamelogs.json", {"gamelogs": []})
        with pytest.raises(PayloadError, match="non-empty"):
            DataLoader.load_gamelogs(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(PayloadError, match="cannot read"):
            DataLoader.load_gamelogs(str(tmp_path / "missing.json"))

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(PayloadError, match="not valid JSON"):
            DataLoader.load_gamelogs(str(path))

    def test_load_market_quotes(self, tmp_path):
        path = _write(
            tmp_path,
            "odds.json",
            {"props": [
                {"prop": "SOG", "side": "Over", "line": 2.5, "bookmaker": "fanduel", "price_american": -115},
                {"prop": "SOG", "side": "Over", "line": 2.5, "bookmaker": "betmgm", "price_american": 0},
            ]},
        )
        quotes = DataLoader.load_market_quotes(path)
        assert len(quotes) == 1
        assert quotes[0].price_american == -115

    def test_empty_market_payload_raises(self, tmp_path):
        with pytest.raises(PayloadError):
            DataLoader.load_market_quotes(_write(tmp_path, "odds.json", []))
