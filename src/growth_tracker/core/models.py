"""Pydantic data models shared by acquisition, analysis and the watchlist."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# --- Type Aliases ---

Ticker = str
SourceName = str

SYNTHETIC_SOURCE: SourceName = "synthetic"

# --- Enumerations ---


class PeriodType(StrEnum):
    """Reporting granularity of a financial period."""

    QUARTER = "quarter"
    ANNUAL = "annual"


# --- Watchlist Models ---


class Stock(BaseModel):
    """A watch-listed equity. Identity is the ticker symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: Ticker
    name: str
    sector: str | None = None
    industry: str | None = None
    price: float | None = None

    @field_validator("symbol")
    @classmethod
    def symbol_normalized(cls, v: str) -> str:
        symbol = v.strip().upper()
        if not symbol:
            raise ValueError("symbol must not be empty")
        return symbol

    def with_price(self, price: float | None) -> Stock:
        """Return a copy of this stock carrying the given price."""
        return self.model_copy(update={"price": price})


# --- Financial Data Models ---


class FinancialPeriod(BaseModel):
    """Income-statement summary for one reporting period."""

    model_config = ConfigDict(frozen=True)

    date: date
    symbol: Ticker
    period: PeriodType = PeriodType.QUARTER
    revenue: float
    eps: float


class AcquisitionResult(BaseModel):
    """Time series handed from the acquisition pipeline to the engine.

    ``is_synthetic`` must travel with the records all the way to the
    consumer, which discloses it as simulated data.
    """

    model_config = ConfigDict(frozen=True)

    records: list[FinancialPeriod]
    is_synthetic: bool
    source: SourceName

    @field_validator("records")
    @classmethod
    def records_not_empty(cls, v: list[FinancialPeriod]) -> list[FinancialPeriod]:
        if not v:
            raise ValueError("records must not be empty")
        return v


class PriceQuote(BaseModel):
    """Latest price for a symbol and where it came from."""

    model_config = ConfigDict(frozen=True)

    symbol: Ticker
    price: float
    is_synthetic: bool
    source: SourceName


# --- Analysis Models ---


class AnalysisSummary(BaseModel):
    """Growth metrics derived from a symbol's financial history.

    Recomputed on every refresh, never persisted. Growth fields are
    percentages (5.0 means +5%).
    """

    model_config = ConfigDict(frozen=True)

    symbol: Ticker
    name: str
    price: float | None = None
    current_revenue: float
    previous_revenue: float
    revenue_growth_qoq: float
    revenue_growth_yoy: float
    current_eps: float
    previous_eps: float
    eps_growth_qoq: float
    eps_growth_yoy: float
    consecutive_growth_quarters: int
    consecutive_decline_quarters: int
    is_historic_max_revenue: bool
    is_historic_max_eps: bool
    last_updated: datetime

    @field_validator("consecutive_growth_quarters", "consecutive_decline_quarters")
    @classmethod
    def streak_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"streak counters must be >= 0, got {v}")
        return v
