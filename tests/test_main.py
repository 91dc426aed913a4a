"""Tests for the command-line interface."""

import json

import pandas as pd
import pytest

from proplab.main import _parse_bounds, main


@pytest.fixture
def gamelog_file(tmp_path):
    rows = []
    for i, (sog, opponent) in enumerate([(1, "BOS"), (3, "MTL"), (2, "BOS"), (4, "NYR")]):
        rows.append(
            {
                "game_id": f"g{i}",
                "game_date": f"2024-10-{10 + i * 2}",
                "season_id": "20242025",
                "player_team_abbrev": "TOR",
                "home_abbrev": "TOR",
                "away_abbrev": opponent,
                "venue": "Home",
                "shots_on_goal": sog,
                "corsi": sog + 2,
                "goals": i % 2,
                "team_goals": 3,
                "toi_seconds": 1000 + i * 60,
            }
        )
    path = tmp_path / "gamelogs.json"
    path.write_text(json.dumps({"gamelogs": rows}))
    return str(path)


@pytest.fixture
def odds_file(tmp_path):
    rows = [
        {"prop": "SOG", "side": "Over", "line": 2.5, "bookmaker": "draftkings", "price_american": 150},
        {"prop": "SOG", "side": "Over", "line": 2.5, "bookmaker": "fanduel", "price_american": 140},
        {"prop": "SOG", "side": "Over", "line": 3.5, "bookmaker": "fanduel", "price_american": 230},
    ]
    path = tmp_path / "odds.json"
    path.write_text(json.dumps({"props": rows}))
    return str(path)


def test_parse_bounds():
    assert _parse_bounds(["goals=1", " shots_on_goal = 3 "]) == {"goals": "1", "shots_on_goal": "3"}
    assert _parse_bounds(None) == {}


def test_odds_command(capsys):
    assert main(["odds", "-150"]) == 0
    out = capsys.readouterr().out
    assert "decimal 1.667" in out
    assert "implied 60.0%" in out


def test_odds_command_with_win_pct(capsys):
    assert main(["odds", "100", "--win-pct", "60"]) == 0
    out = capsys.readouterr().out
    assert "EV +20.00 on 100 (+20.0% ROI)" in out
    assert "Kelly 100.00 of 1000 (10.0%)" in out


def test_odds_command_rejects_zero(capsys):
    assert main(["odds", "0"]) == 1
    assert "Invalid American price" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 1


def test_gamelog_filters_and_csv(gamelog_file, tmp_path, capsys):
    csv_path = tmp_path / "out.csv"
    assert main(["gamelog", "-i", gamelog_file, "--opponent", "BOS", "--csv", str(csv_path)]) == 0
    out = capsys.readouterr().out
    assert "2 of 4 games match (1 active filters)" in out
    frame = pd.read_csv(csv_path)
    assert len(frame) == 2
    assert set(frame["opponent_code"]) == {"BOS"}


def test_gamelog_table(gamelog_file, capsys):
    assert main(["gamelog", "-i", gamelog_file, "--min", "shots_on_goal=3"]) == 0
    out = capsys.readouterr().out
    assert "MTL" in out
    assert "NYR" in out


def test_gamelog_missing_file(tmp_path, capsys):
    assert main(["gamelog", "-i", str(tmp_path / "none.json")]) == 1
    assert "Error loading data" in capsys.readouterr().out


def test_insights_report(gamelog_file, odds_file, tmp_path, capsys):
    report_path = tmp_path / "report.json"
    code = main([
        "insights", "-i", gamelog_file, "--prop", "SOG", "--line", "2.5",
        "--odds", odds_file, "--output", str(report_path),
    ])
    assert code == 0
    out = capsys.readouterr().out
    assert "2/4 (50.0%)" in out
    assert "best +150 @ DraftKings" in out

    report = json.loads(report_path.read_text())
    assert set(report) == {
        "filters_active", "insight", "shot_quality", "shot_volume",
        "time_on_ice", "goal_share", "shooting_pct", "rolling", "lines", "value",
    }
    assert len(report["goal_share"]["series"]) == 4
    assert report["insight"]["field"] == "shots_on_goal"
    assert len(report["rolling"]) == 4
    assert [line["line"] for line in report["lines"]] == [2.5, 3.5]
    assert report["value"]["edge"] == pytest.approx(10.0)


def test_insights_last_n_period(gamelog_file, capsys):
    assert main(["insights", "-i", gamelog_file, "--prop", "SOG", "--line", "2.5", "--period", "L2"]) == 0
    assert "1/2 (50.0%)" in capsys.readouterr().out


def test_insights_unknown_prop(gamelog_file, capsys):
    assert main(["insights", "-i", gamelog_file, "--prop", "Mystery", "--line", "0.5"]) == 1
    assert "unknown prop 'Mystery'" in capsys.readouterr().out


def test_insights_bad_side(gamelog_file, capsys):
    assert main(["insights", "-i", gamelog_file, "--prop", "SOG", "--line", "2.5", "--side", "sideways"]) == 1


def test_lines_command(odds_file, capsys):
    assert main(["lines", "--odds", odds_file, "--prop", "Shots on Goal"]) == 0
    out = capsys.readouterr().out
    assert "2.5: best +150 @ DraftKings | DraftKings +150, FanDuel +140" in out
    assert "3.5: best +230 @ FanDuel" in out


def test_lines_command_no_match(odds_file, capsys):
    assert main(["lines", "--odds", odds_file, "--prop", "Goals", "--side", "Under"]) == 0
    assert "No Under lines for Goals" in capsys.readouterr().out
