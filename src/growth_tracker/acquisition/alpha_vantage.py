"""Alpha Vantage adapter.

Alpha Vantage reports problems in-band: a 200 response whose body carries
``Error Message``, ``Note`` (throttling) or ``Information`` (premium or demo
restriction) instead of data. Those bodies are treated as failures.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from growth_tracker.acquisition.base import HttpSourceAdapter
from growth_tracker.acquisition.normalize import (
    build_period,
    require_history,
    resolve_eps,
    to_float,
)
from growth_tracker.core.config import AcquisitionConfig, AlphaVantageConfig
from growth_tracker.core.exceptions import SourceError
from growth_tracker.core.models import FinancialPeriod, PeriodType

logger = logging.getLogger(__name__)

_BASE_URL = "https://www.alphavantage.co/query"
_ERROR_KEYS = ("Error Message", "Note", "Information")

_REPORT_KEYS: dict[PeriodType, tuple[str, str]] = {
    PeriodType.QUARTER: ("quarterlyReports", "quarterlyEarnings"),
    PeriodType.ANNUAL: ("annualReports", "annualEarnings"),
}


class AlphaVantageAdapter(HttpSourceAdapter):
    """Fetches income statements, reported EPS and quotes from Alpha Vantage."""

    name = "alpha_vantage"

    def __init__(
        self,
        api_key: str = "demo",
        base_url: str = _BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._base_url = base_url

    @classmethod
    def from_config(
        cls,
        config: AlphaVantageConfig,
        acquisition: AcquisitionConfig,
        client: httpx.AsyncClient | None = None,
    ) -> AlphaVantageAdapter:
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            period=acquisition.period,
            min_periods=acquisition.min_periods,
            timeout=config.timeout,
            rate_limit=config.rate_limit,
            client=client,
        )

    async def _query(self, function: str, symbol: str) -> dict[str, Any]:
        data = await self._get_json(
            self._base_url,
            symbol,
            params={"function": function, "symbol": symbol, "apikey": self._api_key},
        )
        if not isinstance(data, dict):
            raise self._error(f"{function} response for {symbol} is not an object", symbol)
        for key in _ERROR_KEYS:
            if data.get(key):
                raise self._error(f"{function}({symbol}) error: {data[key]}", symbol)
        return data

    async def fetch_periods(self, symbol: str) -> list[FinancialPeriod]:
        reports_key, earnings_key = _REPORT_KEYS[self._period]

        income = await self._query("INCOME_STATEMENT", symbol)
        reports = income.get(reports_key)
        if not isinstance(reports, list) or not reports:
            raise self._error(f"no {reports_key} for {symbol}", symbol)

        eps_by_date = await self._reported_eps(symbol, earnings_key)

        records = []
        for report in reports:
            if not isinstance(report, dict):
                continue
            fiscal_date = report.get("fiscalDateEnding")
            eps = resolve_eps(
                eps_by_date.get(fiscal_date),
                report.get("netIncome"),
                report.get("sharesOutstanding"),
            )
            records.append(
                build_period(symbol, self._period, fiscal_date, report.get("totalRevenue"), eps)
            )
        return require_history(records, self._min_periods, self.name, symbol)

    async def _reported_eps(self, symbol: str, earnings_key: str) -> dict[str, Any]:
        """Map fiscal date → reported EPS. Empty when earnings are unavailable."""
        try:
            earnings = await self._query("EARNINGS", symbol)
        except SourceError as e:
            logger.info("Alpha Vantage earnings unavailable for %s: %s", symbol, e)
            return {}
        return {
            row.get("fiscalDateEnding"): row.get("reportedEPS")
            for row in earnings.get(earnings_key) or []
            if isinstance(row, dict)
        }

    async def fetch_price(self, symbol: str) -> float:
        data = await self._query("GLOBAL_QUOTE", symbol)
        quote = data.get("Global Quote") or {}
        price = to_float(quote.get("05. price"))
        if price is None or price <= 0:
            raise self._error(f"quote for {symbol} has no usable price", symbol)
        return price
