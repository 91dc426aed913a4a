"""Sportsbook odds conversions and market grouping."""

from .conversions import american_to_decimal, implied_win_probability
from .markets import best_price, group_market_lines, list_lines, parse_market_rows
from .value import ValueComparison, value_comparison

__all__ = [
    "ValueComparison",
    "american_to_decimal",
    "best_price",
    "group_market_lines",
    "implied_win_probability",
    "list_lines",
    "parse_market_rows",
    "value_comparison",
]
