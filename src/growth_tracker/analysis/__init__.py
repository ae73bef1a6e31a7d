"""growth_tracker.analysis: revenue and EPS growth metrics."""

from growth_tracker.analysis.engine import (
    MIN_PERIODS,
    analyze,
    consecutive_decline,
    consecutive_growth,
    growth_percentage,
)

__all__ = [
    "MIN_PERIODS",
    "analyze",
    "consecutive_decline",
    "consecutive_growth",
    "growth_percentage",
]
