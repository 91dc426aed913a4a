"""Compound game-log filtering and date ordering."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from ..data.normalize import parse_game_date, to_optional_number
from ..models.game import STAT_FIELDS, GameRecord

logger = logging.getLogger(__name__)

ALL = "all"
SEARCH_STAT_FIELDS = ("goals", "assists", "points", "shots_on_goal", "toi_seconds")
_REST_BUCKET_RE = re.compile(r"^\s*(\d+)\s*\+\s*$")
_PERIOD_RE = re.compile(r"^L(\d+)$", re.IGNORECASE)


@dataclass
class FilterCriteria:
    """Independent optional predicates; ``None``, ``""`` or ``"all"`` match everything."""

    opponent: Optional[str] = None
    venue: Optional[str] = None
    date_from: Any = None
    date_to: Any = None
    rest_days: Any = None
    time_bucket: Optional[str] = None
    day_of_week: Optional[str] = None
    season_id: Optional[str] = None
    stat_min: Dict[str, Any] = field(default_factory=dict)
    stat_max: Dict[str, Any] = field(default_factory=dict)
    toi_min_minutes: Any = None
    toi_max_minutes: Any = None
    search: Optional[str] = None

    def active_count(self) -> int:
        """Number of active criteria, as shown on the filter badge."""
        count = sum(
            1
            for value in (
                self.opponent,
                self.venue,
                self.date_from,
                self.date_to,
                self.rest_days,
                self.time_bucket,
                self.day_of_week,
                self.season_id,
                self.toi_min_minutes,
                self.toi_max_minutes,
                self.search,
            )
            if _is_active(value)
        )
        count += sum(1 for value in self.stat_min.values() if _is_active(value))
        count += sum(1 for value in self.stat_max.values() if _is_active(value))
        return count


def _is_active(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        text = value.strip()
        return bool(text) and text.lower() != ALL
    return True


def _fold(value: Any) -> str:
    return str(value or "").strip().lower()


def _number_text(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _rest_days_predicate(value: Any) -> Optional[Callable[[GameRecord], bool]]:
    text = str(value).strip()
    bucket = _REST_BUCKET_RE.match(text)
    if bucket:
        minimum = int(bucket.group(1))
        return lambda r: r.rest_days is not None and r.rest_days >= minimum
    exact = to_optional_number(text)
    if exact is None:
        logger.warning("Ignoring unparseable rest-days filter %r", value)
        return None
    return lambda r: r.rest_days is not None and r.rest_days == int(exact)


def _date_bound(value: Any, end_of_day: bool) -> Optional[pd.Timestamp]:
    parsed = parse_game_date(value)
    if not parsed.is_parsed:
        logger.warning("Ignoring unparseable date bound %r", value)
        return None
    ts = parsed.timestamp.normalize()
    if end_of_day:
        ts = ts + timedelta(days=1) - timedelta(microseconds=1)
    return ts


def _stat_bound(name: str, value: Any) -> Optional[float]:
    if name not in STAT_FIELDS:
        logger.warning("Ignoring filter on unknown stat %r", name)
        return None
    bound = to_optional_number(value)
    if bound is None:
        logger.warning("Ignoring unparseable %s bound %r", name, value)
    return bound


def build_predicates(criteria: FilterCriteria) -> List[Callable[[GameRecord], bool]]:
    """Translate active criteria into record predicates. Never raises."""
    predicates: List[Callable[[GameRecord], bool]] = []

    if _is_active(criteria.opponent):
        opponent = str(criteria.opponent).strip()
        predicates.append(lambda r: r.opponent == opponent)

    if _is_active(criteria.venue):
        venue = _fold(criteria.venue)
        predicates.append(lambda r: _fold(r.venue) == venue)

    if _is_active(criteria.date_from):
        start = _date_bound(criteria.date_from, end_of_day=False)
        if start is not None:
            # unparsed game dates cannot be compared and are kept
            predicates.append(lambda r: not r.game_date.is_parsed or r.game_date.timestamp >= start)

    if _is_active(criteria.date_to):
        end = _date_bound(criteria.date_to, end_of_day=True)
        if end is not None:
            predicates.append(lambda r: not r.game_date.is_parsed or r.game_date.timestamp <= end)

    if _is_active(criteria.rest_days):
        rest = _rest_days_predicate(criteria.rest_days)
        if rest is not None:
            predicates.append(rest)

    for attr in ("time_bucket", "day_of_week", "season_id"):
        wanted = getattr(criteria, attr)
        if _is_active(wanted):
            predicates.append(lambda r, a=attr, w=_fold(wanted): _fold(getattr(r, a)) == w)

    for name, value in criteria.stat_min.items():
        if _is_active(value):
            bound = _stat_bound(name, value)
            if bound is not None:
                predicates.append(lambda r, n=name, b=bound: r.stat(n) >= b)

    for name, value in criteria.stat_max.items():
        if _is_active(value):
            bound = _stat_bound(name, value)
            if bound is not None:
                predicates.append(lambda r, n=name, b=bound: r.stat(n) <= b)

    if _is_active(criteria.toi_min_minutes):
        minutes = to_optional_number(criteria.toi_min_minutes)
        if minutes is not None:
            predicates.append(lambda r, s=minutes * 60: r.toi_seconds >= s)

    if _is_active(criteria.toi_max_minutes):
        minutes = to_optional_number(criteria.toi_max_minutes)
        if minutes is not None:
            predicates.append(lambda r, s=minutes * 60: r.toi_seconds <= s)

    if _is_active(criteria.search):
        query = _fold(criteria.search)
        predicates.append(lambda r: matches_search(r, query))

    return predicates


def matches_search(record: GameRecord, query: str) -> bool:
    """Substring match over the opponent code and the headline stat values."""
    query = _fold(query)
    if not query:
        return True
    if query in record.opponent.lower():
        return True
    return any(query in _number_text(record.stat(name)) for name in SEARCH_STAT_FIELDS)


def filter_records(records: Sequence[GameRecord], criteria: Optional[FilterCriteria] = None) -> List[GameRecord]:
    """Return, in input order, the records satisfying every active criterion."""
    if criteria is None:
        return list(records)
    predicates = build_predicates(criteria)
    return [r for r in records if all(p(r) for p in predicates)]


def sort_by_date(records: Sequence[GameRecord], descending: bool = False) -> List[GameRecord]:
    """Stable sort by game date; records with unparsed dates always go last."""
    dated = [r for r in records if r.game_date.is_parsed]
    undated = [r for r in records if not r.game_date.is_parsed]
    dated.sort(key=lambda r: r.game_date.timestamp, reverse=descending)
    return dated + undated


def select_recent(records: Sequence[GameRecord], count: int) -> List[GameRecord]:
    """The ``count`` most recent games, returned oldest-first for charting."""
    if count <= 0:
        return []
    newest_first = sort_by_date(records, descending=True)[:count]
    newest_first.reverse()
    return newest_first


def apply_period(
    records: Sequence[GameRecord],
    period: Optional[str],
    opponent: Optional[str] = None,
) -> List[GameRecord]:
    """Apply a period chip (``"L10"``, a season id, or ``"vsOpponent"``).

    The result is always in ascending date order, ready for the chart.
    """
    if not _is_active(period):
        return sort_by_date(records)
    period = str(period).strip()
    if period == "vsOpponent":
        if not _is_active(opponent):
            return sort_by_date(records)
        return sort_by_date(filter_records(records, FilterCriteria(opponent=opponent)))
    last_n = _PERIOD_RE.match(period)
    if last_n:
        return select_recent(records, int(last_n.group(1)))
    return sort_by_date(filter_records(records, FilterCriteria(season_id=period)))
