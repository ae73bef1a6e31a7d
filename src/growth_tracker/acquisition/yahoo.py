"""Yahoo Finance source adapter over the public JSON endpoints.

Uses the ``/v10/finance/quoteSummary/`` endpoint for income statements,
``/v8/finance/chart/`` for the latest price and ``/v1/finance/search`` for
symbol lookup. Statement values come wrapped as ``{"raw": ..., "fmt": ...}``
and dates as epoch seconds.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from growth_tracker.acquisition.base import HttpSourceAdapter
from growth_tracker.acquisition.normalize import (
    build_period,
    first_present,
    require_history,
    resolve_eps,
    to_float,
)
from growth_tracker.core.config import AcquisitionConfig, YahooConfig
from growth_tracker.core.exceptions import SourceError
from growth_tracker.core.models import FinancialPeriod, PeriodType, Stock

logger = logging.getLogger(__name__)

_BASE_URL = "https://query2.finance.yahoo.com"
_SUMMARY_PATH = "/v10/finance/quoteSummary"
_CHART_PATH = "/v8/finance/chart"
_SEARCH_PATH = "/v1/finance/search"

_STATEMENT_MODULES: dict[PeriodType, str] = {
    PeriodType.QUARTER: "incomeStatementHistoryQuarterly",
    PeriodType.ANNUAL: "incomeStatementHistory",
}


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None


class YahooFinanceAdapter(HttpSourceAdapter):
    """Fetches statements, prices and symbol metadata from Yahoo Finance."""

    name = "yahoo"

    def __init__(self, base_url: str = _BASE_URL, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._base_url = base_url.rstrip("/")

    @classmethod
    def from_config(
        cls,
        config: YahooConfig,
        acquisition: AcquisitionConfig,
        client: httpx.AsyncClient | None = None,
    ) -> YahooFinanceAdapter:
        return cls(
            base_url=config.base_url,
            period=acquisition.period,
            min_periods=acquisition.min_periods,
            timeout=config.timeout,
            rate_limit=config.rate_limit,
            client=client,
        )

    async def _quote_summary(self, symbol: str, modules: list[str]) -> dict[str, Any]:
        """Fetch ``quoteSummary.result[0]`` for the given modules."""
        data = await self._get_json(
            f"{self._base_url}{_SUMMARY_PATH}/{symbol}",
            symbol,
            params={"modules": ",".join(modules)},
        )
        return self._first_result(data, "quoteSummary", symbol)

    def _first_result(self, data: Any, key: str, symbol: str) -> dict[str, Any]:
        """Unwrap ``{key: {"result": [{...}], "error": ...}}`` to its first result."""
        envelope = data.get(key) if isinstance(data, dict) else None
        if not isinstance(envelope, dict):
            raise self._error(f"malformed {key} response for {symbol}", symbol)

        err = envelope.get("error")
        if err:
            if isinstance(err, dict):
                err = f"{err.get('code')} ({err.get('description')})"
            raise self._error(f"API error for {symbol}: {err}", symbol)

        results = envelope.get("result")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise self._error(f"no {key} results for {symbol}", symbol)
        return results[0]

    async def fetch_periods(self, symbol: str) -> list[FinancialPeriod]:
        module = _STATEMENT_MODULES[self._period]
        result = await self._quote_summary(symbol, [module, "defaultKeyStatistics"])

        statements = _mapping(result.get(module)).get("incomeStatementHistory")
        if not isinstance(statements, list) or not statements:
            raise self._error(f"no {module} data for {symbol}", symbol)

        shares = _mapping(result.get("defaultKeyStatistics")).get("sharesOutstanding")
        records = []
        for statement in statements:
            if not isinstance(statement, dict):
                continue
            eps = resolve_eps(
                first_present(statement, "dilutedEPS", "basicEPS"),
                statement.get("netIncome"),
                shares,
            )
            records.append(
                build_period(
                    symbol,
                    self._period,
                    statement.get("endDate"),
                    statement.get("totalRevenue"),
                    eps,
                )
            )
        return require_history(records, self._min_periods, self.name, symbol)

    async def fetch_price(self, symbol: str) -> float:
        data = await self._get_json(
            f"{self._base_url}{_CHART_PATH}/{symbol}",
            symbol,
            params={"interval": "1d", "range": "1d"},
        )
        result = self._first_result(data, "chart", symbol)
        price = to_float(_mapping(result.get("meta")).get("regularMarketPrice"))
        if price is None or price <= 0:
            raise self._error(f"chart for {symbol} has no usable price", symbol)
        return price

    async def search(self, query: str) -> Stock | None:
        """Resolve a free-text query or ticker to a Stock.

        Falls back to a bare Stock when the query looks like a ticker
        (alphabetic, under 6 characters) but no lookup succeeds.
        """
        text = query.strip()
        if not text:
            return None

        try:
            data = await self._get_json(
                f"{self._base_url}{_SEARCH_PATH}",
                text,
                params={
                    "q": text,
                    "quotesCount": 1,
                    "newsCount": 0,
                    "enableFuzzyQuery": "false",
                },
            )
            quotes = data.get("quotes") if isinstance(data, dict) else None
            if isinstance(quotes, list) and quotes and _text(_mapping(quotes[0]).get("symbol")):
                return await self._stock_from_quote(quotes[0])
        except SourceError as e:
            logger.warning("Yahoo search failed for %r: %s", text, e)

        if len(text) < 6 and text.isalpha():
            symbol = text.upper()
            logger.info("Assuming %s is a valid ticker without additional details", symbol)
            return Stock(symbol=symbol, name=symbol)

        logger.info("No search results for %r", text)
        return None

    async def _stock_from_quote(self, quote: dict[str, Any]) -> Stock:
        symbol = _text(quote["symbol"])
        name = _text(quote.get("shortname")) or _text(quote.get("longname")) or symbol
        sector = _text(quote.get("sector"))
        industry = _text(quote.get("industry"))

        try:
            result = await self._quote_summary(symbol, ["assetProfile"])
            profile = _mapping(result.get("assetProfile"))
            sector = _text(profile.get("sector")) or sector
            industry = _text(profile.get("industry")) or industry
        except SourceError as e:
            logger.info("No asset profile for %s: %s", symbol, e)

        return Stock(symbol=symbol, name=name, sector=sector, industry=industry)
