"""Sportsbook market models."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class MarketQuote:
    """One bookmaker's American-odds price for a prop/side/line."""

    prop: str
    side: str
    line: float
    bookmaker: str
    price_american: int


@dataclass(frozen=True)
class BookPrice:
    """A bookmaker price annotated with its implied win percentage."""

    bookmaker: str
    price_american: int
    implied_win_pct: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "bookmaker": self.bookmaker,
            "price_american": self.price_american,
            "implied_win_pct": self.implied_win_pct,
        }


@dataclass
class MarketLine:
    """All quotes sharing (prop, side, line) and the best price among them."""

    prop: str
    side: str
    line: float
    books: List[BookPrice] = field(default_factory=list)
    best: Optional[BookPrice] = None

    @property
    def best_price(self) -> Optional[int]:
        return self.best.price_american if self.best else None

    @property
    def best_bookmaker(self) -> Optional[str]:
        return self.best.bookmaker if self.best else None

    def to_dict(self) -> dict:
        """Convert line to dictionary."""
        return {
            "prop": self.prop,
            "side": self.side,
            "line": self.line,
            "books": [b.to_dict() for b in self.books],
            "best": self.best.to_dict() if self.best else None,
        }
