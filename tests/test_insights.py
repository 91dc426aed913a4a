"""Tests for hit-rate and season comparison insights."""

import pytest

from proplab.analytics.insights import (
    calculate_insights,
    goal_share_season_average,
    is_hit,
    normalize_side,
    shooting_pct_season_average,
    shot_quality_insights,
    shot_volume_insights,
    streaks,
    time_on_ice_insights,
)
from proplab.models.game import GameRecord


def _series(values, field="goals"):
    return [GameRecord(**{field: float(v)}) for v in values]


class TestSides:
    @pytest.mark.parametrize("side,expected", [("Over", "Over"), ("O", "Over"), ("over", "Over"),
                                               ("u", "Under"), (" Under ", "Under")])
    def test_normalize_side(self, side, expected):
        assert normalize_side(side) == expected

    @pytest.mark.parametrize("side", ["", None, "push", "either"])
    def test_bad_side_rejected(self, side):
        with pytest.raises(ValueError):
            normalize_side(side)

    def test_strict_inequality(self):
        assert is_hit(3, 2.5, "Over")
        assert not is_hit(2, 2, "Over")
        assert not is_hit(2, 2, "Under")
        assert is_hit(1, 2, "U")


def test_streaks():
    assert streaks([]) == (0, 0)
    assert streaks([True, True, False, True]) == (1, 2)
    assert streaks([False, True, True, True]) == (3, 3)


class TestCalculateInsights:
    def test_over(self):
        insight = calculate_insights(_series([1, 3, 2, 4]), "goals", 2.5, "Over")
        assert insight.total == 4
        assert insight.hits == 2
        assert insight.hit_rate == 50.0
        assert insight.current_streak == 1
        assert insight.longest_streak == 1
        assert insight.average == 2.5
        assert insight.max_value == 4
        assert insight.min_value == 1

    def test_under(self):
        insight = calculate_insights(_series([1, 3, 2, 1]), "goals", 2.5, "Under")
        assert insight.hits == 3
        assert insight.hit_rate == 75.0
        assert insight.longest_streak == 2
        assert insight.current_streak == 2
        assert insight.side == "Under"

    def test_value_equal_to_line_counts_but_never_hits(self):
        insight = calculate_insights(_series([2, 3, 2]), "goals", 2, "Over")
        assert insight.total == 3
        assert insight.hits == 1
        assert insight.current_streak == 0
        assert insight.hit_rate == pytest.approx(100 / 3)

    def test_season_defaults_to_window(self):
        insight = calculate_insights(_series([1, 2]), "goals", 0.5)
        assert insight.season_average == insight.average
        assert insight.difference == 0

    def test_season_comparison(self):
        season = _series([0, 0, 1, 2, 3, 0])
        window = season[2:5]
        insight = calculate_insights(window, "goals", 0.5, season=season)
        assert insight.average == 2.0
        assert insight.season_average == 1.0
        assert insight.difference == 1.0

    def test_empty_window(self):
        insight = calculate_insights([], "goals", 0.5, season=_series([1, 3]))
        assert insight.total == 0
        assert insight.hits == 0
        assert insight.hit_rate == 0
        assert insight.average == 0
        assert insight.season_average == 2.0
        assert insight.max_value == 0
        assert insight.recent_total == 0

    def test_recent_hits(self):
        insight = calculate_insights(_series([3, 3, 0, 3, 0]), "goals", 0.5, recent_games=3)
        assert insight.recent_total == 3
        assert insight.recent_hits == 1

    def test_counts(self):
        insight = calculate_insights(_series([0, 1, 2, 3]), "goals", 0.5)
        assert insight.games_with_value == 3
        assert insight.games_with_multiple == 2
        assert insight.games_with_zero == 1

    def test_hit_rate_bounds_and_idempotence(self):
        series = _series([0, 4, 1, 1, 5, 2])
        first = calculate_insights(series, "goals", 1.5, "O")
        second = calculate_insights(series, "goals", 1.5, "O")
        assert first == second
        assert 0 <= first.hit_rate <= 100
        assert first.hits <= first.total

    def test_missing_field_is_zero(self):
        insight = calculate_insights(_series([1, 2]), "no_such_stat", 0.5, "Under")
        assert insight.hits == 2

    def test_bad_side_raises(self):
        with pytest.raises(ValueError):
            calculate_insights(_series([1]), "goals", 0.5, "sideways")

    def test_to_dict(self):
        data = calculate_insights(_series([1]), "goals", 0.5).to_dict()
        assert data["field"] == "goals"
        assert data["hits"] == 1


class TestPanelInsights:
    def test_shot_quality(self):
        window = [GameRecord(sog_HD=2, shots_on_goal=4, goals_HD=1), GameRecord(sog_HD=0, shots_on_goal=4)]
        insight = shot_quality_insights(window)
        assert insight.average == 1.0
        assert insight.hd_shot_pct == 25.0
        assert insight.hd_shooting_pct == 50.0

    def test_shot_quality_zero_guards(self):
        insight = shot_quality_insights([GameRecord()])
        assert insight.hd_shot_pct == 0
        assert insight.hd_shooting_pct == 0
        assert shot_quality_insights([]).average == 0

    def test_shot_volume(self):
        season = [GameRecord(shots_on_goal=2, corsi=4), GameRecord(shots_on_goal=4, corsi=8)]
        insight = shot_volume_insights(season[1:], season)
        assert insight.avg_shots == 4
        assert insight.season_avg_shots == 3
        assert insight.diff_shots == 1
        assert insight.diff_corsi == 2

    def test_time_on_ice(self):
        season = [GameRecord(toi_seconds=900), GameRecord(toi_seconds=1200)]
        insight = time_on_ice_insights(season[:1], season)
        assert insight.average == 900
        assert insight.difference == -150

    def test_goal_share_and_shooting_season(self):
        season = [GameRecord(goals=1, team_goals=4, shots_on_goal=5), GameRecord(goals=1, team_goals=4, shots_on_goal=5)]
        assert goal_share_season_average([], season) == 25.0
        assert shooting_pct_season_average([], season) == 20.0
        assert goal_share_season_average([GameRecord(goals=1)]) == 0
