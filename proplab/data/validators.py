"""Schema validators for game-log and market payloads."""

from __future__ import annotations

from typing import List

from .normalize import to_optional_number

GAMELOG_ROW_KEYS = ("gamelogs", "games")
MARKET_ROW_KEYS = ("props", "markets", "odds")


def extract_rows(payload, keys) -> List:
    """Return the row list from a bare list or the first matching envelope key."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            rows = payload.get(key)
            if isinstance(rows, list):
                return rows
    return []


def validate_gamelogs_payload(payload) -> List[str]:
    rows = extract_rows(payload, GAMELOG_ROW_KEYS)
    if not rows:
        return ["gamelog payload must be a non-empty list or include a 'gamelogs' list"]

    errors: List[str] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            errors.append(f"gamelogs[{idx}] must be an object")
            continue
        if row.get("game_date") is None and row.get("date") is None:
            errors.append(f"gamelogs[{idx}] missing game_date")
        if not (row.get("player_team_abbrev") or row.get("player_team")):
            errors.append(f"gamelogs[{idx}] missing player team")
    return errors


def validate_market_payload(payload) -> List[str]:
    rows = extract_rows(payload, MARKET_ROW_KEYS)
    if not rows:
        return ["market payload must be a non-empty list or include a 'props' list"]

    errors: List[str] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            errors.append(f"props[{idx}] must be an object")
            continue
        if not (row.get("prop") or row.get("prop_name")):
            errors.append(f"props[{idx}] missing prop name")
        if not (row.get("side") or row.get("ou")):
            errors.append(f"props[{idx}] missing side")
        if to_optional_number(row.get("line")) is None:
            errors.append(f"props[{idx}] missing/invalid numeric field 'line'")
    return errors


def summarize_errors(errors: List[str], limit: int = 5) -> str:
    shown = errors[:limit]
    more = len(errors) - len(shown)
    text = "; ".join(shown)
    if more > 0:
        text += f" (+{more} more)"
    return text
