"""Shared pytest fixtures for growth-tracker."""

from datetime import date

import pytest

from growth_tracker.core.models import FinancialPeriod, PeriodType, Stock

QUARTER_ENDS = [
    date(2024, 12, 31),
    date(2024, 9, 30),
    date(2024, 6, 30),
    date(2024, 3, 31),
    date(2023, 12, 31),
    date(2023, 9, 30),
    date(2023, 6, 30),
    date(2023, 3, 31),
]


def build_series(
    revenues: list[float],
    eps: list[float] | None = None,
    symbol: str = "AAPL",
) -> list[FinancialPeriod]:
    """Quarterly periods, newest first, from current-first value lists."""
    eps = eps if eps is not None else [r / 100 for r in revenues]
    return [
        FinancialPeriod(
            date=QUARTER_ENDS[i],
            symbol=symbol,
            period=PeriodType.QUARTER,
            revenue=revenue,
            eps=eps[i],
        )
        for i, revenue in enumerate(revenues)
    ]


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def sample_stock() -> Stock:
    return Stock(
        symbol="AAPL",
        name="Apple Inc.",
        sector="Technology",
        industry="Consumer Electronics",
        price=189.5,
    )


@pytest.fixture
def sample_periods() -> list[FinancialPeriod]:
    """Revenue oldest→newest [100, 110, 120, 90, 95]."""
    return build_series([95.0, 90.0, 120.0, 110.0, 100.0], eps=[1.9, 1.8, 2.4, 2.2, 2.0])


@pytest.fixture
def fmp_income_statement() -> list[dict]:
    """Financial Modeling Prep quarterly income statement, newest first."""
    revenues = [119_575, 94_930, 85_777, 90_753, 119_575 * 0.98, 89_498]
    dates = ["2024-12-28", "2024-09-28", "2024-06-29", "2024-03-30", "2023-12-30", "2023-09-30"]
    return [
        {
            "date": d,
            "symbol": "AAPL",
            "period": "Q",
            "revenue": r * 1e6,
            "netIncome": r * 0.25 * 1e6,
            "epsdiluted": round(r / 50_000, 2),
            "weightedAverageShsOutDil": 15_400_000_000,
        }
        for d, r in zip(dates, revenues)
    ]
