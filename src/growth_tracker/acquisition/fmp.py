"""Financial Modeling Prep adapter.

Uses the v3 ``income-statement`` and ``quote`` endpoints. Requires an API
key; the registry skips this source when none is configured.
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
from growth_tracker.core.config import AcquisitionConfig, FMPConfig
from growth_tracker.core.models import FinancialPeriod

logger = logging.getLogger(__name__)

_BASE_URL = "https://financialmodelingprep.com/api/v3"


class FMPAdapter(HttpSourceAdapter):
    """Fetches income statements and quotes from Financial Modeling Prep."""

    name = "fmp"

    def __init__(
        self,
        api_key: str,
        base_url: str = _BASE_URL,
        limit: int = 12,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._limit = limit

    @classmethod
    def from_config(
        cls,
        config: FMPConfig,
        acquisition: AcquisitionConfig,
        client: httpx.AsyncClient | None = None,
    ) -> FMPAdapter:
        return cls(
            api_key=config.api_key or "",
            base_url=config.base_url,
            limit=config.limit,
            period=acquisition.period,
            min_periods=acquisition.min_periods,
            timeout=config.timeout,
            rate_limit=config.rate_limit,
            client=client,
        )

    async def fetch_periods(self, symbol: str) -> list[FinancialPeriod]:
        data = await self._get_json(
            f"{self._base_url}/income-statement/{symbol}",
            symbol,
            params={
                "period": self._period.value,
                "limit": self._limit,
                "apikey": self._api_key,
            },
        )
        if isinstance(data, dict) and data.get("Error Message"):
            raise self._error(data["Error Message"], symbol)
        if not isinstance(data, list) or not data:
            raise self._error(f"no income statements for {symbol}", symbol)

        records = [
            self._to_period(symbol, item) for item in data if isinstance(item, dict)
        ]
        periods = require_history(records, self._min_periods, self.name, symbol)
        logger.debug("FMP returned %d periods for %s", len(periods), symbol)
        return periods

    def _to_period(self, symbol: str, item: dict[str, Any]) -> FinancialPeriod | None:
        eps = resolve_eps(
            first_present(item, "epsdiluted", "epsDiluted", "eps"),
            item.get("netIncome"),
            first_present(item, "weightedAverageShsOutDil", "weightedAverageShsOut"),
        )
        return build_period(symbol, self._period, item.get("date"), item.get("revenue"), eps)

    async def fetch_price(self, symbol: str) -> float:
        data = await self._get_json(
            f"{self._base_url}/quote/{symbol}",
            symbol,
            params={"apikey": self._api_key},
        )
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise self._error(f"no quote for {symbol}", symbol)

        price = to_float(data[0].get("price"))
        if price is None or price <= 0:
            raise self._error(f"quote for {symbol} has no usable price", symbol)
        return price
