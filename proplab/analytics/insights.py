"""Season-vs-window insights for the prop lab panels.

Each function is a pure reduction over its arguments.  ``season`` is the
full reference collection; when a caller has nothing broader than the
filtered window it is omitted and the window doubles as the season.
"""

from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

from ..models.game import GameRecord
from .derived import safe_pct
from .rolling import field_values

OVER = "Over"
UNDER = "Under"
_SIDES = {"over": OVER, "o": OVER, "under": UNDER, "u": UNDER}


def normalize_side(side: str) -> str:
    """Map ``"O"``/``"over"``/``"Over"`` (and the Under forms) to the canonical side."""
    key = str(side or "").strip().lower()
    if key not in _SIDES:
        raise ValueError(f"Side must be Over or Under, got {side!r}")
    return _SIDES[key]


def is_hit(value: float, line: float, side: str) -> bool:
    """Strict inequality: a value equal to the line is never a hit."""
    if normalize_side(side) == OVER:
        return value > line
    return value < line


def _mean(values) -> float:
    return float(values.sum() / len(values)) if len(values) else 0.0


@dataclass
class Insight:
    """Hit-rate and average summary for one field against one line."""

    field: str
    line: float
    side: str
    total: int
    hits: int
    hit_rate: float
    average: float
    season_average: float
    difference: float
    current_streak: int
    longest_streak: int
    recent_hits: int
    recent_total: int
    max_value: float
    min_value: float
    games_with_value: int
    games_with_multiple: int
    games_with_zero: int

    def to_dict(self) -> dict:
        return asdict(self)


def streaks(flags: Sequence[bool]) -> tuple:
    """Return ``(current, longest)`` runs of consecutive ``True`` values."""
    current = 0
    longest = 0
    for flag in flags:
        if flag:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return current, longest


def calculate_insights(
    window: Sequence[GameRecord],
    field: str,
    line: float,
    side: str = OVER,
    season: Optional[Sequence[GameRecord]] = None,
    recent_games: int = 10,
) -> Insight:
    """
    Summarize ``field`` over ``window`` against ``line``.

    Args:
        window: filtered games, oldest first
        field: numeric attribute to evaluate (e.g. ``"shots_on_goal"``)
        line: Over/Under threshold
        side: ``"Over"`` or ``"Under"``
        season: full-season reference collection (defaults to ``window``)
        recent_games: size of the trailing "last N" hit count

    Returns:
        Insight. Games equal to the line count toward ``total`` but are
        neither hits nor part of a streak.
    """
    side = normalize_side(side)
    reference = window if season is None else season
    values = field_values(window, field)
    flags: List[bool] = [is_hit(float(v), line, side) for v in values]

    total = len(flags)
    hits = sum(flags)
    current, longest = streaks(flags)
    avg = _mean(values)
    season_avg = _mean(field_values(reference, field)) if len(reference) else avg
    recent = flags[-recent_games:] if recent_games > 0 else []

    return Insight(
        field=field,
        line=float(line),
        side=side,
        total=total,
        hits=hits,
        hit_rate=safe_pct(hits, total),
        average=avg,
        season_average=season_avg,
        difference=avg - season_avg,
        current_streak=current,
        longest_streak=longest,
        recent_hits=sum(recent),
        recent_total=len(recent),
        max_value=float(values.max()) if total else 0.0,
        min_value=float(values.min()) if total else 0.0,
        games_with_value=int((values > 0).sum()),
        games_with_multiple=int((values >= 2).sum()),
        games_with_zero=int((values == 0).sum()),
    )


@dataclass
class ShotQualityInsight:
    """High-danger shot profile."""

    average: float
    season_average: float
    difference: float
    hd_shot_pct: float
    hd_shooting_pct: float


def shot_quality_insights(
    window: Sequence[GameRecord], season: Optional[Sequence[GameRecord]] = None
) -> ShotQualityInsight:
    reference = window if season is None else season
    hd_shots = field_values(window, "sog_HD")
    total_hd = float(hd_shots.sum())
    total_shots = float(field_values(window, "shots_on_goal").sum())
    total_hd_goals = float(field_values(window, "goals_HD").sum())

    avg = _mean(hd_shots)
    season_avg = _mean(field_values(reference, "sog_HD")) if len(reference) else avg
    return ShotQualityInsight(
        average=avg,
        season_average=season_avg,
        difference=avg - season_avg,
        hd_shot_pct=safe_pct(total_hd, total_shots),
        hd_shooting_pct=safe_pct(total_hd_goals, total_hd),
    )


@dataclass
class ShotVolumeInsight:
    """Shots on goal and shot attempts (Corsi) against the season."""

    avg_shots: float
    avg_corsi: float
    season_avg_shots: float
    season_avg_corsi: float
    diff_shots: float
    diff_corsi: float


def shot_volume_insights(
    window: Sequence[GameRecord], season: Optional[Sequence[GameRecord]] = None
) -> ShotVolumeInsight:
    reference = window if season is None else season
    avg_shots = _mean(field_values(window, "shots_on_goal"))
    avg_corsi = _mean(field_values(window, "corsi"))
    if len(reference):
        season_shots = _mean(field_values(reference, "shots_on_goal"))
        season_corsi = _mean(field_values(reference, "corsi"))
    else:
        season_shots, season_corsi = avg_shots, avg_corsi
    return ShotVolumeInsight(
        avg_shots=avg_shots,
        avg_corsi=avg_corsi,
        season_avg_shots=season_shots,
        season_avg_corsi=season_corsi,
        diff_shots=avg_shots - season_shots,
        diff_corsi=avg_corsi - season_corsi,
    )


@dataclass
class TimeOnIceInsight:
    average: float
    season_average: float
    difference: float


def time_on_ice_insights(
    window: Sequence[GameRecord], season: Optional[Sequence[GameRecord]] = None
) -> TimeOnIceInsight:
    reference = window if season is None else season
    avg = _mean(field_values(window, "toi_seconds"))
    season_avg = _mean(field_values(reference, "toi_seconds")) if len(reference) else avg
    return TimeOnIceInsight(average=avg, season_average=season_avg, difference=avg - season_avg)


def goal_share_season_average(
    window: Sequence[GameRecord], season: Optional[Sequence[GameRecord]] = None
) -> float:
    """Season player goals / team goals x 100."""
    reference = window if season is None else season
    goals = float(field_values(reference, "goals").sum())
    team_goals = float(field_values(reference, "team_goals").sum())
    return safe_pct(goals, team_goals)


def shooting_pct_season_average(
    window: Sequence[GameRecord], season: Optional[Sequence[GameRecord]] = None
) -> float:
    """Season goals / shots on goal x 100."""
    reference = window if season is None else season
    goals = float(field_values(reference, "goals").sum())
    shots = float(field_values(reference, "shots_on_goal").sum())
    return safe_pct(goals, shots)
