"""Ordered-fallback acquisition of financial histories and prices.

The pipeline tries each adapter in priority order. Adapter failures are
logged and swallowed here; only total exhaustion degrades to synthetic
data, and the result says so through ``is_synthetic``. Nothing is ever
raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

import httpx

from growth_tracker.acquisition.base import SourceAdapter, registry
from growth_tracker.acquisition.synthetic import SyntheticDataGenerator, synthetic_price
from growth_tracker.core.config import TrackerConfig
from growth_tracker.core.exceptions import InsufficientHistoryError, SourceError
from growth_tracker.core.models import (
    SYNTHETIC_SOURCE,
    AcquisitionResult,
    PriceQuote,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AcquisitionPipeline:
    """Runs source adapters in order, degrading to synthetic data.

    Parameters
    ----------
    adapters : Sequence[SourceAdapter]
        Adapters in priority order. May be empty.
    generator : SyntheticDataGenerator | None
        Fallback producer. A default (unseeded) generator if None.
    min_periods : int
        A source returning fewer periods than this has failed.
    adapter_timeout : float
        Upper bound in seconds on any single adapter call.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter] = (),
        generator: SyntheticDataGenerator | None = None,
        min_periods: int = 5,
        adapter_timeout: float = 5.0,
    ) -> None:
        self._adapters = tuple(adapters)
        self._generator = generator or SyntheticDataGenerator()
        self._min_periods = min_periods
        self._adapter_timeout = adapter_timeout

    @classmethod
    def from_config(
        cls,
        config: TrackerConfig,
        client: httpx.AsyncClient | None = None,
    ) -> AcquisitionPipeline:
        """Build the pipeline and its adapters from configuration."""
        adapters = registry.create_enabled(config.sources, config.acquisition, client=client)
        logger.info(
            "Acquisition sources in priority order: %s",
            ", ".join(a.name for a in adapters) or "(none, synthetic only)",
        )
        return cls(
            adapters=adapters,
            generator=SyntheticDataGenerator(seed=config.acquisition.synthetic_seed),
            min_periods=config.acquisition.min_periods,
            adapter_timeout=config.acquisition.adapter_timeout,
        )

    @property
    def adapters(self) -> tuple[SourceAdapter, ...]:
        return self._adapters

    async def __aenter__(self) -> AcquisitionPipeline:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close every adapter's HTTP resources."""
        for adapter in self._adapters:
            try:
                await adapter.aclose()
            except Exception as e:
                logger.warning("Failed to close source '%s': %s", adapter.name, e)

    async def acquire(self, symbol: str) -> AcquisitionResult:
        """Return the first usable history for ``symbol``, or a synthetic one."""
        for adapter in self._adapters:
            records = await self._attempt(adapter, adapter.fetch_periods, symbol, "periods")
            if records is None:
                continue
            if len(records) < self._min_periods:
                logger.warning(
                    "Source '%s' returned %d periods for %s, need %d",
                    adapter.name, len(records), symbol, self._min_periods,
                )
                continue
            logger.info(
                "Acquired %d periods for %s from '%s'", len(records), symbol, adapter.name
            )
            return AcquisitionResult(records=records, is_synthetic=False, source=adapter.name)

        logger.warning("All sources exhausted for %s, using synthetic data", symbol)
        return AcquisitionResult(
            records=self._generator.generate(symbol),
            is_synthetic=True,
            source=SYNTHETIC_SOURCE,
        )

    async def acquire_price(self, symbol: str) -> PriceQuote:
        """Return the first usable price for ``symbol``, or a stable synthetic one."""
        for adapter in self._adapters:
            price = await self._attempt(adapter, adapter.fetch_price, symbol, "price")
            if price is None:
                continue
            if price <= 0:
                logger.warning(
                    "Source '%s' returned non-positive price %s for %s",
                    adapter.name, price, symbol,
                )
                continue
            return PriceQuote(symbol=symbol, price=price, is_synthetic=False, source=adapter.name)

        logger.warning("No source priced %s, using synthetic price", symbol)
        return PriceQuote(
            symbol=symbol,
            price=synthetic_price(symbol),
            is_synthetic=True,
            source=SYNTHETIC_SOURCE,
        )

    async def _attempt(
        self,
        adapter: SourceAdapter,
        fetch: Callable[[str], Awaitable[T]],
        symbol: str,
        what: str,
    ) -> T | None:
        """Run one adapter call under the timeout. Any failure becomes None."""
        try:
            return await asyncio.wait_for(fetch(symbol), timeout=self._adapter_timeout)
        except InsufficientHistoryError as e:
            logger.warning("Source '%s' has too little history: %s", adapter.name, e)
        except SourceError as e:
            logger.warning("Source '%s' failed %s for %s: %s", adapter.name, what, symbol, e)
        except asyncio.TimeoutError:
            logger.warning(
                "Source '%s' timed out after %.1fs fetching %s for %s",
                adapter.name, self._adapter_timeout, what, symbol,
            )
        except Exception:
            logger.exception(
                "Source '%s' raised unexpectedly fetching %s for %s",
                adapter.name, what, symbol,
            )
        return None
