"""Watchlist refresh: acquire, price and analyze every tracked stock."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from pydantic import BaseModel, ConfigDict, computed_field

from growth_tracker.acquisition.pipeline import AcquisitionPipeline
from growth_tracker.analysis.engine import analyze
from growth_tracker.core.models import (
    AcquisitionResult,
    AnalysisSummary,
    FinancialPeriod,
    PriceQuote,
    SourceName,
    Stock,
    Ticker,
)

logger = logging.getLogger(__name__)


class RefreshReport(BaseModel):
    """Outcome of one refresh cycle over the watchlist.

    ``summaries`` follows watchlist order. Symbols that could not be
    analyzed are listed in ``omitted`` instead. ``is_synthetic`` is true if
    any symbol's history was degraded to synthetic data.
    """

    model_config = ConfigDict(frozen=True)

    summaries: list[AnalysisSummary]
    series: dict[Ticker, list[FinancialPeriod]]
    sources: dict[Ticker, SourceName]
    synthetic_symbols: list[Ticker]
    omitted: list[Ticker]
    refreshed_at: datetime

    @computed_field
    @property
    def is_synthetic(self) -> bool:
        return bool(self.synthetic_symbols)

    def summary_for(self, symbol: str) -> AnalysisSummary | None:
        symbol = symbol.strip().upper()
        return next((s for s in self.summaries if s.symbol == symbol), None)


@dataclass
class _SymbolOutcome:
    stock: Stock
    acquisition: AcquisitionResult | None = None
    price: PriceQuote | None = None
    summary: AnalysisSummary | None = None


async def _refresh_symbol(stock: Stock, pipeline: AcquisitionPipeline) -> _SymbolOutcome:
    """Price, acquire and analyze one stock. Never raises."""
    outcome = _SymbolOutcome(stock=stock)
    try:
        outcome.price = await pipeline.acquire_price(stock.symbol)
        outcome.acquisition = await pipeline.acquire(stock.symbol)
        outcome.summary = analyze(
            outcome.acquisition.records,
            stock.with_price(outcome.price.price),
        )
    except Exception:
        logger.exception("Refresh failed for %s", stock.symbol)
    return outcome


async def refresh_watchlist(
    stocks: Sequence[Stock],
    pipeline: AcquisitionPipeline,
    max_concurrent: int = 1,
) -> RefreshReport:
    """Refresh every stock, at most ``max_concurrent`` at a time.

    One symbol failing never affects the others; it is simply omitted.
    """
    semaphore = asyncio.Semaphore(max_concurrent)

    async def _bounded(stock: Stock) -> _SymbolOutcome:
        async with semaphore:
            return await _refresh_symbol(stock, pipeline)

    logger.info(
        "Refreshing %d stocks (max %d concurrent)", len(stocks), max_concurrent
    )
    outcomes = await asyncio.gather(*(_bounded(stock) for stock in stocks))

    summaries: list[AnalysisSummary] = []
    series: dict[Ticker, list[FinancialPeriod]] = {}
    sources: dict[Ticker, SourceName] = {}
    synthetic: list[Ticker] = []
    omitted: list[Ticker] = []

    for outcome in outcomes:
        symbol = outcome.stock.symbol
        if outcome.acquisition is not None:
            series[symbol] = outcome.acquisition.records
            sources[symbol] = outcome.acquisition.source
            if outcome.acquisition.is_synthetic:
                synthetic.append(symbol)
        if outcome.summary is None:
            omitted.append(symbol)
        else:
            summaries.append(outcome.summary)

    if synthetic:
        logger.warning("Simulated data used for: %s", ", ".join(synthetic))
    if omitted:
        logger.warning("Omitted from results: %s", ", ".join(omitted))

    return RefreshReport(
        summaries=summaries,
        series=series,
        sources=sources,
        synthetic_symbols=synthetic,
        omitted=omitted,
        refreshed_at=datetime.now(timezone.utc),
    )
