"""Raw game-log normalization.

Every downstream stage works on :class:`~proplab.models.game.GameRecord`
instances produced here.  This module owns the three jobs that used to be
scattered across chart components:

1. Parsing the game date, whatever shape the upstream payload used
   (plain string, ``datetime``/``date``, ``pandas.Timestamp`` or a wrapped
   ``{"value": "2024-10-15"}`` object), into a single :class:`ParsedDate`.
2. Resolving field aliases (``5v5_goals`` vs ``ev5_goals``, ``away_abbrev``
   vs ``away_team``, ``pp_mmss`` vs ``toi_pp_seconds`` ...).
3. Coalescing every missing or non-numeric counting stat to ``0.0``.

Nothing here raises on bad data.  A malformed record degrades to its own
zeroed fields; the only exception is ``strict=True``, which turns unknown
keys into :class:`UnknownFieldError` for callers that want schema drift to
fail loudly.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd
import pytz

from ..models.game import STAT_FIELDS, UNPARSED, GameRecord, ParsedDate

logger = logging.getLogger(__name__)


class UnknownFieldError(ValueError):
    """Raised in strict mode when a raw record carries keys outside the schema."""


# canonical field -> accepted raw keys, first present wins
TEXT_ALIASES: Dict[str, tuple] = {
    "game_id": ("game_id", "id"),
    "player_id": ("player_id",),
    "player_name": ("player_name", "name"),
    "season_id": ("season_id", "season"),
    "player_team": ("player_team_abbrev", "player_team", "team_abbrev"),
    "home_team": ("home_abbrev", "home_team"),
    "away_team": ("away_abbrev", "away_team"),
    "venue": ("venue",),
    "time_bucket": ("game_time_bucket", "time_bucket"),
    "day_of_week": ("day_of_week",),
}

STAT_ALIASES: Dict[str, tuple] = {
    "ev5_goals": ("5v5_goals", "ev5_goals"),
    "ev5_assists": ("5v5_assists", "ev5_assists", "ev5_stat"),
    "ev5_points": ("5v5_points", "ev5_points", "ev5_stat"),
    "ev5_shots_on_goal": ("5v5_shots_on_goal", "ev5_shots_on_goal"),
    "ev4_points": ("ev_4v4_points", "ev4_points", "4v4_points"),
    "ev3_points": ("ev_3v3_points", "ev3_points", "3v3_points"),
}

# strength-state TOI arrives as "MM:SS" strings
TOI_ALIASES: Dict[str, tuple] = {
    "toi_ev5_seconds": ("ev_5v5_mmss", "toi_ev5_seconds"),
    "toi_pp_seconds": ("pp_mmss", "toi_pp_seconds"),
    "toi_pk_seconds": ("pk_mmss", "toi_pk_seconds"),
    "toi_ev4_seconds": ("ev_4v4_mmss", "toi_ev4_seconds"),
    "toi_ev3_seconds": ("ev_3v3_mmss", "toi_ev3_seconds"),
}

DATE_KEYS = ("game_date", "date")
REST_KEYS = ("days_rest", "rest_days")
# pandas resolves these against the wall clock
RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def _known_keys() -> frozenset:
    keys = set(DATE_KEYS) | set(REST_KEYS)
    for table in (TEXT_ALIASES, STAT_ALIASES, TOI_ALIASES):
        for aliases in table.values():
            keys.update(aliases)
    keys.update(STAT_FIELDS)
    return frozenset(keys)


KNOWN_KEYS = _known_keys()


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce ``value`` to a finite float, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_optional_number(value: Any) -> Optional[float]:
    """Like :func:`to_number` but returns ``None`` instead of a default."""
    number = to_number(value, default=math.nan)
    return None if math.isnan(number) else number


def mmss_to_seconds(value: Any) -> float:
    """Convert ``"15:30"`` to 930 seconds; numbers pass through, junk is 0."""
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) != 2:
            return 0.0
        minutes = _leading_int(parts[0])
        seconds = _leading_int(parts[1])
        return float(minutes * 60 + seconds)
    return to_number(value)


def _leading_int(text: str) -> int:
    digits = ""
    for ch in text.strip():
        if not ch.isdigit():
            break
        digits += ch
    return int(digits) if digits else 0


def _resolve_tz(tz):
    if tz is None:
        return None
    if isinstance(tz, str):
        try:
            return pytz.timezone(tz)
        except pytz.UnknownTimeZoneError:
            logger.warning("Unknown timezone %r; keeping timestamps in UTC", tz)
            return pytz.UTC
    return tz


def parse_game_date(value: Any, tz=None) -> ParsedDate:
    """Adapt any supported date representation to a :class:`ParsedDate`.

    Args:
        value: string, ``datetime``/``date``, ``pandas.Timestamp``, a mapping
            with a string ``"value"`` key, or an object with a string ``value``
            attribute.
        tz: league timezone (name or tzinfo). Timezone-aware inputs are
            converted to it and made naive; naive inputs are taken as-is.

    Returns:
        A parsed date, or the unparsed variant when nothing could be parsed.
    """
    candidate = value
    if isinstance(candidate, Mapping):
        candidate = candidate.get("value")
    elif not isinstance(candidate, (str, date, datetime, pd.Timestamp)) and isinstance(
        getattr(candidate, "value", None), str
    ):
        candidate = candidate.value

    if candidate is None or (isinstance(candidate, str) and not candidate.strip()):
        return UNPARSED
    if not isinstance(candidate, (str, date, datetime, pd.Timestamp)):
        logger.debug("Unsupported game_date representation: %r", value)
        return ParsedDate(None, raw=value)
    if isinstance(candidate, str) and candidate.strip().lower() in RELATIVE_DATE_WORDS:
        logger.debug("Ignoring relative game_date %r", value)
        return ParsedDate(None, raw=value)

    try:
        ts = pd.Timestamp(candidate.strip() if isinstance(candidate, str) else candidate)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.debug("Could not parse game_date %r: %s", value, exc)
        return ParsedDate(None, raw=value)
    if pd.isna(ts):
        return ParsedDate(None, raw=value)

    if ts.tzinfo is not None:
        zone = _resolve_tz(tz) or pytz.UTC
        ts = ts.tz_convert(zone).tz_localize(None)
    return ParsedDate(ts, raw=value)


def _first_present(raw: Mapping, keys: Iterable[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _first_numeric(raw: Mapping, keys: Iterable[str]) -> float:
    for key in keys:
        number = to_optional_number(raw.get(key))
        if number is not None:
            return number
    return 0.0


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _rest_days(raw: Mapping) -> Optional[int]:
    number = to_optional_number(_first_present(raw, REST_KEYS))
    if number is None or number < 0:
        return None
    return int(number)


def normalize_game_record(raw: Any, tz=None, strict: bool = False) -> GameRecord:
    """Convert one raw game-log row into a canonical :class:`GameRecord`.

    Args:
        raw: loosely-shaped mapping from the data-fetch collaborator
        tz: league timezone used by :func:`parse_game_date`
        strict: raise :class:`UnknownFieldError` on keys outside the schema
            instead of dropping them

    Returns:
        GameRecord with every counting stat populated
    """
    if not isinstance(raw, Mapping):
        logger.debug("Skipping non-mapping game row of type %s", type(raw).__name__)
        return GameRecord()

    unknown = sorted(str(k) for k in raw.keys() if k not in KNOWN_KEYS)
    if unknown:
        if strict:
            raise UnknownFieldError(f"unknown game-log fields: {', '.join(unknown)}")
        logger.debug("Dropping unknown game-log fields: %s", ", ".join(unknown))

    values: Dict[str, Any] = {
        name: _text(_first_present(raw, keys)) for name, keys in TEXT_ALIASES.items()
    }
    values["game_date"] = parse_game_date(_first_present(raw, DATE_KEYS), tz=tz)
    values["rest_days"] = _rest_days(raw)

    for name in STAT_FIELDS:
        if name in STAT_ALIASES:
            values[name] = _first_numeric(raw, STAT_ALIASES[name])
        elif name in TOI_ALIASES:
            values[name] = mmss_to_seconds(_first_present(raw, TOI_ALIASES[name]))
        else:
            values[name] = to_number(raw.get(name))

    return GameRecord(**values)


def normalize_game_records(rows: Iterable[Any], tz=None, strict: bool = False) -> List[GameRecord]:
    """Normalize a batch, preserving input order."""
    return [normalize_game_record(row, tz=tz, strict=strict) for row in rows or []]
