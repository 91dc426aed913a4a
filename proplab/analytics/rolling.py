"""
Windowed chart statistics over a derived game series.

Every series returned here is index-aligned with its input and causal:
the value at index ``i`` only reads records ``0..i``.  Records whose field
is missing or non-numeric contribute 0 to a window.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy import stats

from ..models.game import GameRecord


@dataclass(frozen=True)
class TrendFit:
    """Ordinary least-squares fit of a field against game index."""

    slope: float
    intercept: float

    def at(self, index: int) -> float:
        return self.slope * index + self.intercept


@dataclass(frozen=True)
class RollingPoint:
    """Chart overlays for one game."""

    index: int
    value: float
    rolling_avg: float
    moving_avg: float
    trend_value: Optional[float]
    average_line: float


def field_values(series: Sequence[GameRecord], field: str) -> np.ndarray:
    """Numeric values of ``field`` with missing/non-numeric entries as 0."""
    out = np.zeros(len(series), dtype=float)
    for i, record in enumerate(series):
        value = getattr(record, field, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if np.isfinite(value):
            out[i] = float(value)
    return out


def _window_means(values: np.ndarray, window: int) -> List[float]:
    window = max(1, int(window))
    means: List[float] = []
    for i in range(len(values)):
        start = max(0, i - window + 1)
        means.append(float(values[start:i + 1].mean()))
    return means


def average(series: Sequence[GameRecord], field: str) -> float:
    """Mean of ``field`` over the series; 0 for an empty series."""
    if len(series) == 0:
        return 0.0
    return float(field_values(series, field).sum() / len(series))


def rolling_average(series: Sequence[GameRecord], field: str, window: int) -> List[float]:
    """Trailing mean of ``series[max(0, i - window + 1)..i]`` at every index."""
    return _window_means(field_values(series, field), window)


def moving_average(series: Sequence[GameRecord], field: str, window: int) -> List[float]:
    """Same causal window as :func:`rolling_average`, kept as a separate chart overlay."""
    return _window_means(field_values(series, field), window)


def moving_averages(
    series: Sequence[GameRecord],
    field: str,
    window_short: int = 5,
    window_long: int = 20,
) -> List[Dict[str, float]]:
    """Both overlay windows in one pass, keyed ``"{field}_avg_{window}"``."""
    if max(1, int(window_short)) == max(1, int(window_long)):
        raise ValueError(f"Short and long windows must differ, got {window_short} and {window_long}")
    values = field_values(series, field)
    short = _window_means(values, window_short)
    long_ = _window_means(values, window_long)
    short_key = f"{field}_avg_{window_short}"
    long_key = f"{field}_avg_{window_long}"
    return [{short_key: s, long_key: l} for s, l in zip(short, long_)]


def fit_trend(series: Sequence[GameRecord], field: str) -> Optional[TrendFit]:
    """OLS fit against index; ``None`` when fewer than two points exist."""
    if len(series) < 2:
        return None
    y = field_values(series, field)
    x = np.arange(len(y), dtype=float)
    result = stats.linregress(x, y)
    return TrendFit(slope=float(result.slope), intercept=float(result.intercept))


def trend_line(series: Sequence[GameRecord], field: str) -> List[Optional[float]]:
    """Fitted trend value at every index (all ``None`` below two points)."""
    fit = fit_trend(series, field)
    if fit is None:
        return [None] * len(series)
    return [fit.at(i) for i in range(len(series))]


def build_rolling_series(
    series: Sequence[GameRecord],
    field: str,
    rolling_window: int = 5,
    moving_window: int = 20,
) -> List[RollingPoint]:
    """Assemble every chart overlay for ``field`` into one aligned series."""
    values = field_values(series, field)
    rolling = _window_means(values, rolling_window)
    moving = _window_means(values, moving_window)
    trend = trend_line(series, field)
    avg = average(series, field)
    return [
        RollingPoint(
            index=i,
            value=float(values[i]),
            rolling_avg=rolling[i],
            moving_avg=moving[i],
            trend_value=trend[i],
            average_line=avg,
        )
        for i in range(len(series))
    ]


def goal_share_series(
    series: Sequence[GameRecord],
    window: int = 5,
    min_team_goals: float = 5,
) -> List[Optional[float]]:
    """Windowed player goals / team goals x 100.

    ``None`` until the window holds at least ``min_team_goals`` team goals,
    which keeps early-season spikes off the chart.
    """
    goals = field_values(series, "goals")
    team_goals = field_values(series, "team_goals")
    window = max(1, int(window))
    out: List[Optional[float]] = []
    for i in range(len(series)):
        start = max(0, i - window + 1)
        total_team = float(team_goals[start:i + 1].sum())
        if total_team < min_team_goals or total_team == 0:
            out.append(None)
            continue
        out.append(float(goals[start:i + 1].sum()) / total_team * 100.0)
    return out


def shooting_pct_series(series: Sequence[GameRecord], window: int = 5) -> List[float]:
    """Trailing mean of the per-game shooting percentage."""
    return _window_means(field_values(series, "shooting_pct_game"), window)
