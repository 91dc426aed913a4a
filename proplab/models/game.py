"""Per-game player records."""

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, Dict, Optional

import pandas as pd

UNKNOWN_TEAM = "UNK"


@dataclass(frozen=True)
class ParsedDate:
    """Result of the game-date adapter: a naive league-local timestamp or unparsed."""

    timestamp: Optional[pd.Timestamp] = None
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def is_parsed(self) -> bool:
        return self.timestamp is not None

    @property
    def day(self) -> Optional[date]:
        return self.timestamp.date() if self.timestamp is not None else None

    @property
    def iso(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d") if self.timestamp is not None else ""

    @property
    def display(self) -> str:
        """Short ``MM/DD`` label used under chart bars."""
        return self.timestamp.strftime("%m/%d") if self.timestamp is not None else ""


UNPARSED = ParsedDate()


@dataclass(frozen=True)
class GameRecord:
    """Canonical player-game row. Every counting stat is populated (0.0 when absent)."""

    game_id: str = ""
    player_id: str = ""
    player_name: str = ""
    season_id: str = ""
    game_date: ParsedDate = UNPARSED

    player_team: str = ""
    home_team: str = ""
    away_team: str = ""
    venue: str = ""
    rest_days: Optional[int] = None
    time_bucket: str = ""
    day_of_week: str = ""

    # Scoring
    goals: float = 0.0
    assists: float = 0.0
    assists1: float = 0.0
    assists2: float = 0.0
    points: float = 0.0

    # Shot volume
    shots_on_goal: float = 0.0
    corsi: float = 0.0
    fenwick: float = 0.0
    shots_missed: float = 0.0
    shots_blocked_by_defense: float = 0.0
    blocks: float = 0.0
    hits_for: float = 0.0
    shifts: float = 0.0

    # Danger zones (high / medium / low)
    sog_HD: float = 0.0
    sat_HD: float = 0.0
    sat_MD: float = 0.0
    sat_LD: float = 0.0
    goals_HD: float = 0.0
    goals_MD: float = 0.0
    goals_LD: float = 0.0

    # Team totals for the player's side
    team_goals: float = 0.0
    team_assists: float = 0.0
    team_points: float = 0.0
    team_pp_goals: float = 0.0
    team_pp_points: float = 0.0

    # Power play
    pp_goals: float = 0.0
    pp_assists: float = 0.0
    pp_assists1: float = 0.0
    pp_assists2: float = 0.0
    pp_points: float = 0.0
    pp_corsi: float = 0.0
    pp_shots_on_goal: float = 0.0

    # Even strength
    ev5_goals: float = 0.0
    ev5_assists: float = 0.0
    ev5_points: float = 0.0
    ev5_shots_on_goal: float = 0.0
    ev4_points: float = 0.0
    ev3_points: float = 0.0

    # Time on ice (seconds)
    toi_seconds: float = 0.0
    toi_ev5_seconds: float = 0.0
    toi_pp_seconds: float = 0.0
    toi_pk_seconds: float = 0.0
    toi_ev4_seconds: float = 0.0
    toi_ev3_seconds: float = 0.0

    @property
    def opponent(self) -> str:
        """Whichever of home/away is not the player's own team."""
        return self.home_team if self.away_team == self.player_team else self.away_team

    def stat(self, name: str) -> float:
        value = getattr(self, name, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        return float(value)


NON_STAT_FIELDS = frozenset(
    {
        "game_id",
        "player_id",
        "player_name",
        "season_id",
        "game_date",
        "player_team",
        "home_team",
        "away_team",
        "venue",
        "rest_days",
        "time_bucket",
        "day_of_week",
    }
)

STAT_FIELDS = tuple(f.name for f in fields(GameRecord) if f.name not in NON_STAT_FIELDS)


@dataclass(frozen=True)
class DerivedRecord(GameRecord):
    """GameRecord plus per-game computed attributes consumed by charts and tables."""

    opponent_code: str = UNKNOWN_TEAM
    opponent_label: str = ""
    formatted_date: str = ""

    shot_attempts: float = 0.0
    shooting_pct_game: float = 0.0
    sat_total: float = 0.0
    hd_remaining_attempts: float = 0.0
    goals_by_danger_total: float = 0.0
    goals_total: float = 0.0
    other_goals: float = 0.0
    pk_goals: float = 0.0

    pp_sat: float = 0.0
    sog_total: float = 0.0
    missed_and_blocked: float = 0.0
    ev_points: float = 0.0
    toi_total: float = 0.0
    pp_toi_minutes: float = 0.0

    assists_total: float = 0.0
    assists_strength_total: float = 0.0
    assists_team_total: float = 0.0
    assists_points_total: float = 0.0
    assists_goals_total: float = 0.0
    points_total: float = 0.0
    points_team_total: float = 0.0
    points_team_goals_total: float = 0.0
    points_share_pct: float = 0.0
    pp_points_share_pct: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "game_date":
                value = value.iso or None
            out[f.name] = value
        return out
