"""Synthetic financial data, the last link of every fallback chain.

Used when no configured source can deliver a usable history. Results built
from this module are always flagged ``is_synthetic`` by the pipeline.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

import numpy as np
import pandas as pd

from growth_tracker.core.models import FinancialPeriod, PeriodType

logger = logging.getLogger(__name__)

SYNTHETIC_PERIODS = 12
_BASE_REVENUE_BAND = (1.0e10, 1.2e10)
_GROWTH_STEP = 0.05
_NOISE = 0.05
_EPS_DIVISOR = 1e9

_PRICE_FLOOR = 100
_PRICE_RANGE = 400


class SyntheticDataGenerator:
    """Produces plausible quarterly revenue/EPS series.

    Parameters
    ----------
    rng : numpy.random.Generator | None
        Randomness source. Takes precedence over ``seed``.
    seed : int | None
        Seed for a fresh generator; identical seeds give identical series.
    today : Callable[[], date] | None
        Clock for the most recent period. Defaults to ``date.today``.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._today = today or date.today

    def generate(self, symbol: str) -> list[FinancialPeriod]:
        """Return 12 quarterly periods, most recent first.

        Revenue trends upward toward the present: period ``i`` (0 = latest)
        is ``base * (1 + (12 - i) * 0.05 + noise)`` with noise in ±5%.
        EPS tracks revenue at a fixed ratio.
        """
        logger.warning("Generating synthetic financials for %s", symbol)
        anchor = pd.Timestamp(self._today())
        base_revenue = self._rng.uniform(*_BASE_REVENUE_BAND)

        periods: list[FinancialPeriod] = []
        for i in range(SYNTHETIC_PERIODS):
            growth = (
                1
                + (SYNTHETIC_PERIODS - i) * _GROWTH_STEP
                + self._rng.uniform(-_NOISE, _NOISE)
            )
            revenue = float(base_revenue * growth)
            periods.append(
                FinancialPeriod(
                    date=(anchor - pd.DateOffset(months=3 * i)).date(),
                    symbol=symbol,
                    period=PeriodType.QUARTER,
                    revenue=revenue,
                    eps=revenue / _EPS_DIVISOR,
                )
            )
        return periods


def synthetic_price(symbol: str) -> float:
    """Stable stand-in price derived from the symbol's characters.

    The same symbol always maps to the same price in [100, 500).
    """
    checksum = sum(ord(ch) for ch in symbol.strip().upper())
    return float(_PRICE_FLOOR + checksum % _PRICE_RANGE)
