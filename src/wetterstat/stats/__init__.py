"""Daily statistics and rain streaks."""

from wetterstat.stats.daily import (
    RAIN_UNIT_SCALE,
    SUN_THRESHOLD,
    DailyStatsAggregator,
    compute_day_stats,
    sunshine_hours,
)
from wetterstat.stats.streaks import MAX_LOOKBACK_DAYS, StreakAnalyzer

__all__ = [
    "DailyStatsAggregator",
    "StreakAnalyzer",
    "compute_day_stats",
    "sunshine_hours",
    "MAX_LOOKBACK_DAYS",
    "RAIN_UNIT_SCALE",
    "SUN_THRESHOLD",
]
