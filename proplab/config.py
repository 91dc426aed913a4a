"""Engine configuration knobs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_PREFERRED_BOOKS = ("fanduel", "draftkings", "betmgm")


def _safe_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class EngineConfig:
    """Display-statistics defaults shared by the CLI and the analytics modules."""

    timezone: str = DEFAULT_TIMEZONE
    rolling_window: int = 5
    moving_window: int = 20
    recent_games: int = 10
    goal_share_min_team_goals: int = 5
    preferred_books: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_PREFERRED_BOOKS)
    strict_schema: bool = False

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config with ``PROPLAB_*`` environment overrides applied."""
        base = cls()
        books_env = os.getenv("PROPLAB_PREFERRED_BOOKS")
        if books_env:
            books = tuple(b.strip().lower() for b in books_env.split(",") if b.strip())
        else:
            books = base.preferred_books
        strict_env = str(os.getenv("PROPLAB_STRICT_SCHEMA", "")).strip().lower()
        return cls(
            timezone=os.getenv("PROPLAB_TIMEZONE") or base.timezone,
            rolling_window=_safe_int(os.getenv("PROPLAB_ROLLING_WINDOW"), base.rolling_window),
            moving_window=_safe_int(os.getenv("PROPLAB_MOVING_WINDOW"), base.moving_window),
            recent_games=_safe_int(os.getenv("PROPLAB_RECENT_GAMES"), base.recent_games),
            goal_share_min_team_goals=_safe_int(
                os.getenv("PROPLAB_GOAL_SHARE_MIN_TEAM_GOALS"), base.goal_share_min_team_goals
            ),
            preferred_books=books or base.preferred_books,
            strict_schema=strict_env in {"1", "true", "yes", "y"},
        )
