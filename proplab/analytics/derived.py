"""Per-game derived attributes.

Derivation is a pure function of one record; nothing is cached, so callers
simply re-derive whenever the filtered collection changes.
"""

from dataclasses import fields
from typing import Dict, Iterable, List

import pandas as pd

from ..models.game import UNKNOWN_TEAM, DerivedRecord, GameRecord


def safe_pct(numerator: float, denominator: float) -> float:
    """``numerator / denominator * 100`` with a zero (or negative) denominator giving 0."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100.0


def derive_fields(record: GameRecord) -> Dict[str, object]:
    """Compute the derived attributes for a single record."""
    opponent = record.opponent or UNKNOWN_TEAM
    display_date = record.game_date.display

    ev_points = record.ev5_points + record.ev4_points + record.ev3_points
    pp_assists = record.pp_assists1 + record.pp_assists2

    return {
        "opponent_code": opponent,
        "opponent_label": f"{opponent}\n{display_date}",
        "formatted_date": display_date,
        "shot_attempts": max(0.0, record.corsi - record.shots_on_goal),
        "shooting_pct_game": safe_pct(record.goals, record.shots_on_goal),
        "sat_total": record.sat_HD + record.sat_MD + record.sat_LD,
        "hd_remaining_attempts": max(0.0, record.sat_HD - record.sog_HD),
        "goals_by_danger_total": record.goals_HD + record.goals_MD + record.goals_LD,
        "goals_total": record.goals,
        "other_goals": max(0.0, record.goals - (record.pp_goals + record.ev5_goals)),
        "pk_goals": 0.0,  # not tracked upstream
        "pp_assists": pp_assists,
        "pp_sat": max(0.0, record.pp_corsi - record.pp_shots_on_goal),
        "sog_total": record.pp_shots_on_goal + record.ev5_shots_on_goal,
        "missed_and_blocked": record.shots_missed + record.shots_blocked_by_defense,
        "ev_points": ev_points,
        "toi_total": (
            record.toi_ev5_seconds
            + record.toi_pp_seconds
            + record.toi_pk_seconds
            + record.toi_ev4_seconds
            + record.toi_ev3_seconds
        ),
        "pp_toi_minutes": record.toi_pp_seconds / 60.0,
        "assists_total": record.assists1 + record.assists2,
        "assists_strength_total": pp_assists + record.ev5_assists,
        "assists_team_total": record.assists + record.team_assists,
        "assists_points_total": record.assists + record.points,
        "assists_goals_total": record.assists + record.goals,
        "points_total": ev_points + record.pp_points,
        "points_team_total": record.points + record.team_points,
        "points_team_goals_total": record.points + record.team_goals,
        "points_share_pct": safe_pct(record.points, record.team_points),
        "pp_points_share_pct": safe_pct(record.pp_points, record.points),
    }


def derive_record(record: GameRecord) -> DerivedRecord:
    """Build the :class:`DerivedRecord` for one game."""
    base = {f.name: getattr(record, f.name) for f in fields(GameRecord)}
    base.update(derive_fields(record))
    return DerivedRecord(**base)


def derive_records(records: Iterable[GameRecord]) -> List[DerivedRecord]:
    """One derived record per input record, same order."""
    return [derive_record(r) for r in records]


def to_frame(records: Iterable[DerivedRecord]) -> pd.DataFrame:
    """Tabular view of derived records for the game-log table and CSV export."""
    rows = [r.to_dict() for r in records]
    if not rows:
        return pd.DataFrame(columns=[f.name for f in fields(DerivedRecord)])
    return pd.DataFrame(rows)
