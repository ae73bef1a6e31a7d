"""Growth analysis over a symbol's financial history.

Periods are ranked newest first. Index 0 is the current quarter, index 1
the previous quarter and index 4 the same quarter one year earlier, which
assumes a strict quarterly cadence.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from growth_tracker.core.models import AnalysisSummary, FinancialPeriod, Stock

logger = logging.getLogger(__name__)

MIN_PERIODS = 5
_PREVIOUS = 1
_YEAR_AGO = 4


def growth_percentage(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``.

    Dividing by ``abs(previous)`` keeps the sign equal to the direction of
    change when the base is negative (a narrowing loss is growth). A zero
    base yields 100 for a positive current value and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / abs(previous) * 100


def consecutive_growth(values: Sequence[float]) -> int:
    """Count strict increases from the newest value backward.

    ``values`` is newest first; the scan stops at the first pair where the
    newer value is not strictly greater than the older one.
    """
    count = 0
    for newer, older in zip(values, values[1:]):
        if newer <= older:
            break
        count += 1
    return count


def consecutive_decline(values: Sequence[float]) -> int:
    """Count strict decreases from the newest value backward."""
    count = 0
    for newer, older in zip(values, values[1:]):
        if newer >= older:
            break
        count += 1
    return count


def analyze(
    periods: Sequence[FinancialPeriod],
    stock: Stock,
    now: datetime | None = None,
) -> AnalysisSummary | None:
    """Summarize revenue and EPS growth for one stock.

    Returns None when fewer than five periods are supplied; callers should
    omit the symbol rather than treat this as an error. Input order does
    not matter. ``now`` overrides the computation timestamp.
    """
    if len(periods) < MIN_PERIODS:
        logger.info(
            "Cannot analyze %s: %d periods, need %d",
            stock.symbol, len(periods), MIN_PERIODS,
        )
        return None

    ranked = sorted(periods, key=lambda p: p.date, reverse=True)
    current = ranked[0]
    previous = ranked[_PREVIOUS]
    year_ago = ranked[_YEAR_AGO]

    revenues = [p.revenue for p in ranked]
    eps_values = [p.eps for p in ranked]

    return AnalysisSummary(
        symbol=stock.symbol,
        name=stock.name,
        price=stock.price,
        current_revenue=current.revenue,
        previous_revenue=previous.revenue,
        revenue_growth_qoq=growth_percentage(current.revenue, previous.revenue),
        revenue_growth_yoy=growth_percentage(current.revenue, year_ago.revenue),
        current_eps=current.eps,
        previous_eps=previous.eps,
        eps_growth_qoq=growth_percentage(current.eps, previous.eps),
        eps_growth_yoy=growth_percentage(current.eps, year_ago.eps),
        consecutive_growth_quarters=consecutive_growth(revenues),
        consecutive_decline_quarters=consecutive_decline(revenues),
        is_historic_max_revenue=current.revenue == max(revenues),
        is_historic_max_eps=current.eps == max(eps_values),
        last_updated=now or datetime.now(timezone.utc),
    )
