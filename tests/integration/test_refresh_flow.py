"""End-to-end refresh: config → store → pipeline → engine → report."""

from __future__ import annotations

import httpx
import pytest
import respx

from growth_tracker.acquisition import AcquisitionPipeline
from growth_tracker.refresh import refresh_watchlist
from growth_tracker.watchlist import SqliteWatchlistStore

FMP = "https://financialmodelingprep.com/api/v3"
YAHOO = "https://query2.finance.yahoo.com"


@pytest.fixture
def mocked_network(fmp_income_statement, yahoo_quarterly):
    """AAPL answers on FMP, MSFT only on Yahoo, everything else fails."""
    with respx.mock(assert_all_called=False) as mock:
        mock.get(f"{FMP}/income-statement/AAPL").mock(
            return_value=httpx.Response(200, json=fmp_income_statement)
        )
        mock.get(f"{FMP}/quote/AAPL").mock(
            return_value=httpx.Response(200, json=[{"symbol": "AAPL", "price": 230.1}])
        )
        mock.get(f"{YAHOO}/v10/finance/quoteSummary/MSFT").mock(
            return_value=httpx.Response(200, json=yahoo_quarterly)
        )
        mock.get(f"{YAHOO}/v8/finance/chart/MSFT").mock(
            return_value=httpx.Response(
                200, json={"chart": {"result": [{"meta": {"regularMarketPrice": 415.2}}], "error": None}}
            )
        )
        mock.route(host="financialmodelingprep.com").mock(
            return_value=httpx.Response(200, json={"Error Message": "Invalid ticker"})
        )
        mock.route(host="query2.finance.yahoo.com").mock(return_value=httpx.Response(404))
        yield mock


class TestRefreshFlow:
    async def test_default_watchlist_refresh(self, integration_config, mocked_network):
        store = SqliteWatchlistStore(integration_config.watchlist.path)
        stocks = await store.list()

        async with AcquisitionPipeline.from_config(integration_config) as pipeline:
            report = await refresh_watchlist(stocks, pipeline, max_concurrent=3)

        assert [s.symbol for s in report.summaries] == ["AAPL", "MSFT", "GOOGL", "AMZN", "META"]
        assert report.sources["AAPL"] == "fmp"
        assert report.sources["MSFT"] == "yahoo"
        assert report.synthetic_symbols == ["GOOGL", "AMZN", "META"]
        assert report.is_synthetic is True

        aapl = report.summary_for("AAPL")
        assert aapl.price == 230.1
        assert aapl.current_revenue == 119_575 * 1e6
        assert aapl.is_historic_max_revenue is True

        msft = report.summary_for("MSFT")
        assert msft.price == 415.2
        assert msft.consecutive_growth_quarters == 5
        assert msft.consecutive_decline_quarters == 0
        assert msft.eps_growth_qoq == pytest.approx((1.5 - 1.4) / 1.4 * 100)

    async def test_synthetic_prices_are_stable(self, integration_config, mocked_network):
        store = SqliteWatchlistStore(integration_config.watchlist.path)
        stocks = await store.list()

        async with AcquisitionPipeline.from_config(integration_config) as pipeline:
            first = await refresh_watchlist(stocks, pipeline)
            second = await refresh_watchlist(stocks, pipeline)

        assert first.summary_for("GOOGL").price == second.summary_for("GOOGL").price
        assert 100 <= first.summary_for("GOOGL").price < 500

    async def test_added_stock_refreshed(self, integration_config, mocked_network):
        from growth_tracker.core.models import Stock

        store = SqliteWatchlistStore(integration_config.watchlist.path)
        for symbol in ("MSFT", "GOOGL", "AMZN", "META"):
            await store.remove(symbol)
        await store.add(Stock(symbol="ZZZZ", name="Unknown"))

        async with AcquisitionPipeline.from_config(integration_config) as pipeline:
            report = await refresh_watchlist(await store.list(), pipeline)

        assert [s.symbol for s in report.summaries] == ["AAPL", "ZZZZ"]
        assert len(report.series["ZZZZ"]) == 12
        assert report.synthetic_symbols == ["ZZZZ"]
