"""Integration test fixtures: real config, store and adapters, mocked network."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from growth_tracker.core.config import TrackerConfig


def _epoch(y: int, m: int, d: int) -> int:
    return int(datetime(y, m, d, tzinfo=timezone.utc).timestamp())


@pytest.fixture
def integration_config(tmp_path: Path) -> TrackerConfig:
    """FMP first, then Yahoo. Alpha Vantage disabled."""
    return TrackerConfig.model_validate(
        {
            "sources": {
                "order": ["fmp", "yahoo"],
                "fmp": {"api_key": "integration-key", "rate_limit": 100},
                "yahoo": {"rate_limit": 100},
                "alpha_vantage": {"enabled": False},
            },
            "acquisition": {"adapter_timeout": 2.0, "synthetic_seed": 11},
            "watchlist": {"path": str(tmp_path / "watchlist.db")},
        }
    )


@pytest.fixture
def yahoo_quarterly() -> dict:
    """quoteSummary body with six quarters of steadily rising revenue."""
    quarter_ends = [
        (2024, 12, 31), (2024, 9, 30), (2024, 6, 30),
        (2024, 3, 31), (2023, 12, 31), (2023, 9, 30),
    ]
    statements = [
        {
            "endDate": {"raw": _epoch(*ymd), "fmt": "%04d-%02d-%02d" % ymd},
            "totalRevenue": {"raw": 60_000_000_000 - i * 2_000_000_000},
            "dilutedEPS": {"raw": round(1.5 - i * 0.1, 2)},
        }
        for i, ymd in enumerate(quarter_ends)
    ]
    return {
        "quoteSummary": {
            "result": [{"incomeStatementHistoryQuarterly": {"incomeStatementHistory": statements}}],
            "error": None,
        }
    }
