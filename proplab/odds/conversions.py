"""American/decimal odds conversions and implied probabilities.

Probabilities returned by :func:`implied_win_probability` are percentages
(0-100), matching how the dashboard displays them; the decimal helpers and
the vig utilities work in fractions (0-1).
"""

from typing import List, Optional, Sequence

from ..data.normalize import to_optional_number


def american_price(value) -> Optional[int]:
    """Coerce a raw price to a non-zero American-odds integer, else ``None``."""
    number = to_optional_number(value)
    if number is None:
        return None
    price = int(round(number))
    return price if price != 0 else None


def implied_win_probability(odds) -> Optional[float]:
    """
    Break-even win percentage encoded by an American price.

    +150 -> 40.0, -150 -> 60.0, +100 -> 50.0.  A price of 0 is not a valid
    American quote and yields ``None`` rather than a division by zero.
    """
    price = american_price(odds)
    if price is None:
        return None
    if price > 0:
        return 100.0 / (price + 100.0) * 100.0
    return abs(price) / (abs(price) + 100.0) * 100.0


def american_to_decimal(odds) -> Optional[float]:
    price = american_price(odds)
    if price is None:
        return None
    if price > 0:
        return price / 100.0 + 1.0
    return 100.0 / abs(price) + 1.0


def decimal_to_american(decimal_odds: float) -> Optional[int]:
    """Inverse of :func:`american_to_decimal`; ``None`` for prices at or below 1.0."""
    if decimal_odds is None or decimal_odds <= 1.0:
        return None
    if decimal_odds >= 2.0:
        return int(round((decimal_odds - 1.0) * 100.0))
    return int(round(-100.0 / (decimal_odds - 1.0)))


def implied_probability_from_decimal(decimal_odds: float) -> Optional[float]:
    if decimal_odds is None or decimal_odds <= 0:
        return None
    return 1.0 / decimal_odds


def vig_percentage(probabilities: Sequence[float]) -> float:
    """Bookmaker margin as a percentage of the overround."""
    total = float(sum(probabilities))
    if total <= 0:
        return 0.0
    return (total - 1.0) / total * 100.0


def no_vig_probabilities(probabilities: Sequence[float]) -> List[float]:
    """Rescale implied probabilities so they sum to 1."""
    total = float(sum(probabilities))
    if total <= 0:
        return [0.0 for _ in probabilities]
    return [p / total for p in probabilities]


def expected_value(probability: float, odds, stake: float) -> Optional[dict]:
    """
    Expected profit of a bet.

    Args:
        probability: true win probability (0 to 1)
        odds: American price
        stake: amount risked

    Returns:
        ``{"expected_value": ..., "roi": ...}`` or ``None`` for an invalid price
    """
    decimal_odds = american_to_decimal(odds)
    if decimal_odds is None:
        return None
    win_amount = stake * (decimal_odds - 1.0)
    ev = probability * win_amount - (1.0 - probability) * stake
    roi = ev / stake * 100.0 if stake > 0 else 0.0
    return {"expected_value": ev, "roi": roi}


def kelly_stake(probability: float, odds, bankroll: float) -> Optional[dict]:
    """Full-Kelly stake, floored at zero when there is no edge."""
    decimal_odds = american_to_decimal(odds)
    if decimal_odds is None:
        return None
    edge = probability - 1.0 / decimal_odds
    fraction = edge / (decimal_odds - 1.0)
    bet = max(0.0, fraction * bankroll)
    pct = bet / bankroll * 100.0 if bankroll > 0 else 0.0
    return {"bet_amount": bet, "percentage": pct}
