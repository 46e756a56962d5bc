"""Statistics over stored trading days."""

from tradelog.stats.processor import (
    calculate_comparison_stats,
    calculate_stats,
    calculate_stats_for_last_n_days,
    group_logs_by_month,
    group_logs_by_week,
    week_start,
)

__all__ = [
    "calculate_comparison_stats",
    "calculate_stats",
    "calculate_stats_for_last_n_days",
    "group_logs_by_month",
    "group_logs_by_week",
    "week_start",
]
