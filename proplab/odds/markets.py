"""Market-odds grouping and best-price selection."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_PREFERRED_BOOKS
from ..data.normalize import to_optional_number
from ..models.market import BookPrice, MarketLine, MarketQuote
from .conversions import american_price, implied_win_probability

logger = logging.getLogger(__name__)

UNKNOWN_BOOKMAKER = "Unknown"

# display name -> canonical market name
PROP_NAME_ALIASES = {
    "Shots on Goal": "SOG",
    "Shots": "SOG",
    "SOG": "SOG",
    "Assists": "Ast",
    "Ast": "Ast",
    "Points": "Pts",
    "Pts": "Pts",
    "Goals": "Goals",
    "PP Points": "PP Pts",
    "Power Play Points": "PP Pts",
    "PP Pts": "PP Pts",
}

PROP_FIELDS = {
    "Goals": "goals",
    "Assists": "assists",
    "Ast": "assists",
    "Points": "points",
    "Pts": "points",
    "PP Pts": "pp_points",
    "PP Points": "pp_points",
    "Power Play Points": "pp_points",
    "Shots on Goal": "shots_on_goal",
    "Shots": "shots_on_goal",
    "SOG": "shots_on_goal",
    "Corsi": "corsi",
    "Fenwick": "fenwick",
    "Blocks": "blocks",
    "Hits": "hits_for",
}

BOOKMAKER_NAMES = {
    "fanduel": "FanDuel",
    "draftkings": "DraftKings",
    "betmgm": "BetMGM",
    "caesars": "Caesars",
    "williamhill_us": "Caesars",
    "espnbet": "ESPN BET",
    "fanatics": "Fanatics",
    "betrivers": "BetRivers",
    "bet365": "bet365",
    "pointsbetus": "PointsBet",
    "hardrockbet": "Hard Rock Bet",
    "pinnacle": "Pinnacle",
}


def normalize_prop_name(prop: str) -> str:
    text = str(prop or "").strip()
    return PROP_NAME_ALIASES.get(text, text)


def normalize_market_side(side: str) -> str:
    """``"O"``/``"U"`` shorthands become ``"Over"``/``"Under"``; others pass through."""
    text = str(side or "").strip()
    lowered = text.lower()
    if lowered in {"o", "over"}:
        return "Over"
    if lowered in {"u", "under"}:
        return "Under"
    return text


def prop_field(prop: str) -> Optional[str]:
    """Game-record field a prop resolves against, or ``None`` for an unknown prop."""
    field = PROP_FIELDS.get(str(prop or "").strip())
    if field is None:
        logger.warning("Unknown prop %r", prop)
    return field


def _book_key(name: str) -> str:
    return "".join(str(name or "").lower().split())


def bookmaker_display_name(key: str) -> str:
    if not key:
        return UNKNOWN_BOOKMAKER
    return BOOKMAKER_NAMES.get(_book_key(key), str(key))


def _quote(prop, side, line, book, price) -> Optional[MarketQuote]:
    line_value = to_optional_number(line)
    price_value = american_price(price)
    if line_value is None or price_value is None:
        return None
    return MarketQuote(
        prop=normalize_prop_name(prop),
        side=normalize_market_side(side),
        line=line_value,
        bookmaker=str(book or "").strip() or UNKNOWN_BOOKMAKER,
        price_american=price_value,
    )


def parse_market_rows(rows: Iterable[Any]) -> List[MarketQuote]:
    """
    Flatten raw market rows into quotes.

    Accepts flat rows (``prop``, ``side``, ``line``, ``bookmaker``,
    ``price_american``) and the nested props-feed shape carrying a
    ``books`` mapping of ``{book: {"odds": ...}}`` plus a ``best`` entry.
    Rows without a numeric line or with a zero/non-numeric price are skipped.
    """
    quotes: List[MarketQuote] = []
    skipped = 0
    for row in rows or []:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        prop = row.get("prop") or row.get("prop_name")
        side = row.get("side") or row.get("ou")
        line = row.get("line")
        books = row.get("books")
        row_quotes: List[MarketQuote] = []
        if isinstance(books, Mapping) and books:
            for book, data in books.items():
                price = data.get("odds") if isinstance(data, Mapping) else data
                q = _quote(prop, side, line, book, price)
                if q is not None:
                    row_quotes.append(q)
        elif isinstance(row.get("best"), Mapping):
            best = row["best"]
            q = _quote(prop, side, line, best.get("book"), best.get("odds"))
            if q is not None:
                row_quotes.append(q)
        else:
            price = row.get("price_american", row.get("odds", row.get("price")))
            q = _quote(prop, side, line, row.get("bookmaker") or row.get("book"), price)
            if q is not None:
                row_quotes.append(q)
        if not row_quotes:
            skipped += 1
        quotes.extend(row_quotes)
    if skipped:
        logger.debug("Skipped %d market rows without a usable line/price", skipped)
    return quotes


def list_lines(quotes: Iterable[MarketQuote]) -> Dict[Tuple[str, str], List[float]]:
    """Distinct lines per (prop, side), ascending."""
    grouped: Dict[Tuple[str, str], set] = {}
    for q in quotes:
        grouped.setdefault((q.prop, q.side), set()).add(q.line)
    return {key: sorted(lines) for key, lines in grouped.items()}


def _priority(bookmaker: str, preferred: Sequence[str]) -> int:
    key = _book_key(bookmaker)
    preferred_keys = [_book_key(b) for b in preferred]
    return preferred_keys.index(key) if key in preferred_keys else len(preferred_keys)


def best_price(
    books: Sequence[BookPrice],
    preferred_books: Sequence[str] = DEFAULT_PREFERRED_BOOKS,
) -> Optional[BookPrice]:
    """
    Highest signed American price; ``None`` when no book has a usable price.

    Positive prices beat any negative price and, within a sign, the larger
    (less negative) value pays more.  Ties go to the preferred books in
    order, then to input order.  A price of 0 is not a quote and is skipped.
    """
    priced = [b for b in books if american_price(b.price_american) is not None]
    if not priced:
        return None
    top = max(b.price_american for b in priced)
    tied = [b for b in priced if b.price_american == top]
    return min(tied, key=lambda b: _priority(b.bookmaker, preferred_books))


def group_market_lines(
    quotes: Iterable[MarketQuote],
    prop: str,
    side: str,
    preferred_books: Sequence[str] = DEFAULT_PREFERRED_BOOKS,
) -> List[MarketLine]:
    """All lines for ``prop``/``side`` ascending, each with books sorted best-first."""
    wanted_prop = normalize_prop_name(prop)
    wanted_side = normalize_market_side(side)
    by_line: "OrderedDict[float, List[BookPrice]]" = OrderedDict()
    for q in quotes:
        if q.prop != wanted_prop or q.side != wanted_side:
            continue
        by_line.setdefault(q.line, []).append(
            BookPrice(
                bookmaker=q.bookmaker,
                price_american=q.price_american,
                implied_win_pct=implied_win_probability(q.price_american),
            )
        )

    lines: List[MarketLine] = []
    for line_value in sorted(by_line):
        books = by_line[line_value]
        best = best_price(books, preferred_books)
        ordered = sorted(
            books,
            key=lambda b: (-b.price_american, _priority(b.bookmaker, preferred_books)),
        )
        lines.append(MarketLine(prop=wanted_prop, side=wanted_side, line=line_value, books=ordered, best=best))
    return lines


def find_line(lines: Sequence[MarketLine], line: float) -> Optional[MarketLine]:
    """The grouped line equal to ``line``, if offered."""
    for market_line in lines:
        if market_line.line == line:
            return market_line
    return None
