"""Tests for growth_tracker.acquisition.alpha_vantage."""

from datetime import date

import httpx
import pytest
import respx

from growth_tracker.acquisition.alpha_vantage import AlphaVantageAdapter
from growth_tracker.core.exceptions import InsufficientHistoryError, SourceError
from growth_tracker.core.models import PeriodType

BASE = "https://www.alphavantage.co/query"

FISCAL_DATES = [
    "2024-09-30",
    "2024-06-30",
    "2024-03-31",
    "2023-12-31",
    "2023-09-30",
    "2023-06-30",
]


# --- Fixtures ---


@pytest.fixture
def income_statement() -> dict:
    return {
        "symbol": "IBM",
        "quarterlyReports": [
            {
                "fiscalDateEnding": d,
                "reportedCurrency": "USD",
                "totalRevenue": str(15_000_000_000 - i * 100_000_000),
                "netIncome": str(1_500_000_000 - i * 10_000_000),
            }
            for i, d in enumerate(FISCAL_DATES)
        ],
        "annualReports": [
            {
                "fiscalDateEnding": f"{2023 - i}-12-31",
                "totalRevenue": str(60_000_000_000 - i * 1_000_000_000),
                "netIncome": "None",
            }
            for i in range(5)
        ],
    }


@pytest.fixture
def earnings() -> dict:
    return {
        "symbol": "IBM",
        "quarterlyEarnings": [
            {"fiscalDateEnding": d, "reportedEPS": f"{1.80 - i * 0.1:.2f}"}
            for i, d in enumerate(FISCAL_DATES)
        ],
        "annualEarnings": [
            {"fiscalDateEnding": f"{2023 - i}-12-31", "reportedEPS": f"{9.0 - i:.2f}"}
            for i in range(5)
        ],
    }


def _dispatch(responses: dict[str, httpx.Response]):
    """respx side effect routing on the ``function`` query parameter."""

    def handler(request: httpx.Request) -> httpx.Response:
        return responses[request.url.params["function"]]

    return handler


@pytest.fixture
async def adapter():
    async with AlphaVantageAdapter(api_key="demo", rate_limit=100) as a:
        yield a


# --- Tests ---


class TestFetchPeriods:
    @respx.mock
    async def test_merges_revenue_and_reported_eps(self, adapter, income_statement, earnings):
        respx.get(BASE).mock(side_effect=_dispatch({
            "INCOME_STATEMENT": httpx.Response(200, json=income_statement),
            "EARNINGS": httpx.Response(200, json=earnings),
        }))

        periods = await adapter.fetch_periods("IBM")

        assert len(periods) == 6
        assert periods[0].date == date(2024, 9, 30)
        assert periods[0].revenue == 15_000_000_000
        assert periods[0].eps == 1.80
        assert periods[5].eps == pytest.approx(1.30)

    @respx.mock
    async def test_earnings_failure_falls_back_to_zero_eps(self, adapter, income_statement):
        respx.get(BASE).mock(side_effect=_dispatch({
            "INCOME_STATEMENT": httpx.Response(200, json=income_statement),
            "EARNINGS": httpx.Response(200, json={"Note": "Thank you for using Alpha Vantage!"}),
        }))

        periods = await adapter.fetch_periods("IBM")
        # no sharesOutstanding in the report, so EPS cannot be derived
        assert all(p.eps == 0.0 for p in periods)

    @respx.mock
    async def test_eps_derived_from_shares(self, adapter, income_statement):
        for report in income_statement["quarterlyReports"]:
            report["sharesOutstanding"] = "1000000000"
        respx.get(BASE).mock(side_effect=_dispatch({
            "INCOME_STATEMENT": httpx.Response(200, json=income_statement),
            "EARNINGS": httpx.Response(500),
        }))

        periods = await adapter.fetch_periods("IBM")
        assert periods[0].eps == pytest.approx(1.5)

    @respx.mock
    async def test_annual_reports(self, income_statement, earnings):
        respx.get(BASE).mock(side_effect=_dispatch({
            "INCOME_STATEMENT": httpx.Response(200, json=income_statement),
            "EARNINGS": httpx.Response(200, json=earnings),
        }))
        async with AlphaVantageAdapter(period=PeriodType.ANNUAL, rate_limit=100) as a:
            periods = await a.fetch_periods("IBM")
        assert len(periods) == 5
        assert periods[0].date == date(2023, 12, 31)
        assert periods[0].eps == 9.0
        assert all(p.period == PeriodType.ANNUAL for p in periods)

    @pytest.mark.parametrize(
        "body",
        [
            {"Error Message": "Invalid API call."},
            {"Note": "Thank you for using Alpha Vantage! Our standard API rate limit is 25 requests per day."},
            {"Information": "The **demo** API key is for demo purposes only."},
        ],
    )
    @respx.mock
    async def test_in_band_errors(self, adapter, body):
        respx.get(BASE).mock(return_value=httpx.Response(200, json=body))
        with pytest.raises(SourceError, match="INCOME_STATEMENT"):
            await adapter.fetch_periods("IBM")

    @respx.mock
    async def test_missing_reports(self, adapter):
        respx.get(BASE).mock(return_value=httpx.Response(200, json={"symbol": "IBM"}))
        with pytest.raises(SourceError, match="no quarterlyReports"):
            await adapter.fetch_periods("IBM")

    @respx.mock
    async def test_short_history(self, adapter, income_statement, earnings):
        income_statement["quarterlyReports"] = income_statement["quarterlyReports"][:3]
        respx.get(BASE).mock(side_effect=_dispatch({
            "INCOME_STATEMENT": httpx.Response(200, json=income_statement),
            "EARNINGS": httpx.Response(200, json=earnings),
        }))
        with pytest.raises(InsufficientHistoryError):
            await adapter.fetch_periods("IBM")

    @respx.mock
    async def test_sends_api_key(self, income_statement, earnings):
        route = respx.get(BASE).mock(side_effect=_dispatch({
            "INCOME_STATEMENT": httpx.Response(200, json=income_statement),
            "EARNINGS": httpx.Response(200, json=earnings),
        }))
        async with AlphaVantageAdapter(api_key="secret", rate_limit=100) as a:
            await a.fetch_periods("IBM")
        assert route.call_count == 2
        assert all(c.request.url.params["apikey"] == "secret" for c in route.calls)
        assert all(c.request.url.params["symbol"] == "IBM" for c in route.calls)


class TestFetchPrice:
    @respx.mock
    async def test_global_quote(self, adapter):
        respx.get(BASE).mock(return_value=httpx.Response(200, json={
            "Global Quote": {"01. symbol": "IBM", "05. price": "215.3400"},
        }))
        assert await adapter.fetch_price("IBM") == 215.34

    @respx.mock
    async def test_empty_global_quote(self, adapter):
        respx.get(BASE).mock(return_value=httpx.Response(200, json={"Global Quote": {}}))
        with pytest.raises(SourceError, match="no usable price"):
            await adapter.fetch_price("ZZZZ")
