"""Hit rate vs. market-implied win percentage."""

from dataclasses import asdict, dataclass
from typing import Optional

from ..models.market import MarketLine
from .conversions import implied_win_probability


@dataclass
class ValueComparison:
    """How often the prop hit versus how often the best price says it should."""

    hit_rate: float
    implied_win_pct: Optional[float]
    edge: Optional[float]
    best_price: Optional[int]
    bookmaker: Optional[str]

    def to_dict(self) -> dict:
        return asdict(self)


def value_comparison(hit_rate: float, market_line: Optional[MarketLine]) -> ValueComparison:
    """Compare a hit rate (percent) against the best price on ``market_line``."""
    best = market_line.best if market_line is not None else None
    if best is None:
        return ValueComparison(hit_rate=hit_rate, implied_win_pct=None, edge=None, best_price=None, bookmaker=None)
    implied = implied_win_probability(best.price_american)
    edge = hit_rate - implied if implied is not None else None
    return ValueComparison(
        hit_rate=hit_rate,
        implied_win_pct=implied,
        edge=edge,
        best_price=best.price_american,
        bookmaker=best.bookmaker,
    )
