"""Tests for growth_tracker.refresh."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from growth_tracker.acquisition import SyntheticDataGenerator
from growth_tracker.core.models import AcquisitionResult, PriceQuote, Stock
from growth_tracker.refresh import RefreshReport, refresh_watchlist


# --- Fixtures ---


@pytest.fixture
def stocks() -> list[Stock]:
    return [
        Stock(symbol="AAPL", name="Apple Inc."),
        Stock(symbol="MSFT", name="Microsoft Corporation"),
        Stock(symbol="ZZZZ", name="Unknown Corp"),
    ]


@pytest.fixture
def pipeline(make_series):
    """Pipeline mock: AAPL/MSFT come from fmp, ZZZZ is synthetic."""

    async def acquire(symbol):
        if symbol == "ZZZZ":
            return AcquisitionResult(
                records=SyntheticDataGenerator(seed=1).generate(symbol),
                is_synthetic=True,
                source="synthetic",
            )
        return AcquisitionResult(
            records=make_series([95.0, 90.0, 120.0, 110.0, 100.0], symbol=symbol),
            is_synthetic=False,
            source="fmp",
        )

    async def acquire_price(symbol):
        return PriceQuote(symbol=symbol, price=123.0, is_synthetic=False, source="fmp")

    mock = MagicMock()
    mock.acquire = AsyncMock(side_effect=acquire)
    mock.acquire_price = AsyncMock(side_effect=acquire_price)
    return mock


# --- Tests ---


class TestRefreshWatchlist:
    async def test_summaries_in_watchlist_order(self, stocks, pipeline):
        report = await refresh_watchlist(stocks, pipeline)
        assert [s.symbol for s in report.summaries] == ["AAPL", "MSFT", "ZZZZ"]
        assert report.omitted == []

    async def test_price_attached(self, stocks, pipeline):
        report = await refresh_watchlist(stocks, pipeline)
        assert all(s.price == 123.0 for s in report.summaries)

    async def test_growth_computed(self, stocks, pipeline):
        report = await refresh_watchlist(stocks, pipeline)
        aapl = report.summary_for("aapl")
        assert round(aapl.revenue_growth_qoq, 2) == 5.56
        assert round(aapl.revenue_growth_yoy, 2) == -5.0

    async def test_synthetic_flag_aggregated(self, stocks, pipeline):
        report = await refresh_watchlist(stocks, pipeline)
        assert report.is_synthetic is True
        assert report.synthetic_symbols == ["ZZZZ"]
        assert report.sources == {"AAPL": "fmp", "MSFT": "fmp", "ZZZZ": "synthetic"}

    async def test_no_synthetic_when_all_real(self, stocks, pipeline):
        report = await refresh_watchlist(stocks[:2], pipeline)
        assert report.is_synthetic is False

    async def test_short_series_omitted(self, stocks, pipeline, make_series):
        original = pipeline.acquire.side_effect

        async def acquire(symbol):
            if symbol == "MSFT":
                return AcquisitionResult(
                    records=make_series([1.0, 2.0, 3.0], symbol=symbol),
                    is_synthetic=False,
                    source="yahoo",
                )
            return await original(symbol)

        pipeline.acquire.side_effect = acquire
        report = await refresh_watchlist(stocks, pipeline)

        assert report.omitted == ["MSFT"]
        assert [s.symbol for s in report.summaries] == ["AAPL", "ZZZZ"]
        assert len(report.series["MSFT"]) == 3

    async def test_failure_isolated(self, stocks, pipeline, caplog):
        original = pipeline.acquire.side_effect

        async def acquire(symbol):
            if symbol == "AAPL":
                raise RuntimeError("boom")
            return await original(symbol)

        pipeline.acquire.side_effect = acquire
        report = await refresh_watchlist(stocks, pipeline)

        assert report.omitted == ["AAPL"]
        assert "AAPL" not in report.series
        assert [s.symbol for s in report.summaries] == ["MSFT", "ZZZZ"]
        assert "Refresh failed for AAPL" in caplog.text

    async def test_empty_watchlist(self, pipeline):
        report = await refresh_watchlist([], pipeline)
        assert report.summaries == []
        assert report.is_synthetic is False
        pipeline.acquire.assert_not_called()

    async def test_concurrency_bounded(self, stocks, pipeline):
        in_flight = 0
        peak = 0
        original = pipeline.acquire.side_effect

        async def acquire(symbol):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await original(symbol)

        pipeline.acquire.side_effect = acquire

        await refresh_watchlist(stocks, pipeline, max_concurrent=2)
        assert peak == 2

        peak = 0
        await refresh_watchlist(stocks, pipeline)
        assert peak == 1


class TestRefreshReport:
    async def test_json_includes_synthetic_flag(self, stocks, pipeline):
        report = await refresh_watchlist(stocks, pipeline)
        data = json.loads(report.model_dump_json())
        assert data["is_synthetic"] is True
        assert data["synthetic_symbols"] == ["ZZZZ"]
        assert len(data["summaries"]) == 3

    async def test_summary_for_unknown(self, stocks, pipeline):
        report = await refresh_watchlist(stocks, pipeline)
        assert report.summary_for("NVDA") is None

    def test_frozen(self):
        from datetime import datetime, timezone

        report = RefreshReport(
            summaries=[],
            series={},
            sources={},
            synthetic_symbols=[],
            omitted=[],
            refreshed_at=datetime.now(timezone.utc),
        )
        with pytest.raises(ValidationError):
            report.omitted = ["X"]
