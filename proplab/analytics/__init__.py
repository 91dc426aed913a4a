"""Filtering, derived fields, windowed statistics and insights."""

from .derived import derive_record, derive_records
from .filters import FilterCriteria, apply_period, filter_records
from .insights import Insight, calculate_insights
from .rolling import build_rolling_series, moving_average, moving_averages, rolling_average, trend_line

__all__ = [
    "FilterCriteria",
    "Insight",
    "apply_period",
    "build_rolling_series",
    "calculate_insights",
    "derive_record",
    "derive_records",
    "filter_records",
    "moving_average",
    "moving_averages",
    "rolling_average",
    "trend_line",
]
