"""Source adapter protocol, shared HTTP plumbing, and the adapter registry.

Architecture
------------
Every upstream provider is wrapped by an adapter that returns canonical
``FinancialPeriod`` records or raises ``SourceError``:

    Provider JSON → SourceAdapter → list[FinancialPeriod] → AcquisitionPipeline

Adding a provider means writing one adapter class and registering a
factory for it; the pipeline iterates whatever list it is given.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, runtime_checkable

import httpx
from aiolimiter import AsyncLimiter

from growth_tracker.core.config import AcquisitionConfig, SourcesConfig
from growth_tracker.core.exceptions import SourceError
from growth_tracker.core.models import FinancialPeriod, PeriodType

logger = logging.getLogger(__name__)

_USER_AGENT = "Mozilla/5.0 (compatible; growth-tracker/0.1)"


@runtime_checkable
class SourceAdapter(Protocol):
    """One upstream financial-data provider.

    Both operations raise ``SourceError`` on any failure; they never
    return partial or empty data.
    """

    @property
    def name(self) -> str: ...

    async def fetch_periods(self, symbol: str) -> list[FinancialPeriod]:
        """Return at least ``min_periods`` periods, newest first."""
        ...

    async def fetch_price(self, symbol: str) -> float:
        """Return the latest positive market price."""
        ...

    async def aclose(self) -> None: ...


class HttpSourceAdapter:
    """Base class for adapters that speak JSON over HTTP.

    Parameters
    ----------
    period : PeriodType
        Granularity requested from the provider and tagged on each record.
    min_periods : int
        Fewer usable periods than this is a failure.
    timeout : float
        HTTP timeout in seconds.
    rate_limit : int
        Maximum requests per second to this provider.
    client : httpx.AsyncClient | None
        Shared client. If None, the adapter owns and closes its own.
    """

    name = "http"

    def __init__(
        self,
        period: PeriodType = PeriodType.QUARTER,
        min_periods: int = 5,
        timeout: float = 5.0,
        rate_limit: int = 5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._period = period
        self._min_periods = min_periods
        self._limiter = AsyncLimiter(max_rate=rate_limit, time_period=1.0)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": _USER_AGENT},
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    @property
    def period(self) -> PeriodType:
        return self._period

    async def __aenter__(self) -> HttpSourceAdapter:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    def _error(self, message: str, symbol: str, **context: Any) -> SourceError:
        return SourceError(
            f"{self.name}: {message}",
            context={"source": self.name, "symbol": symbol, **context},
        )

    async def _get_json(
        self,
        url: str,
        symbol: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """GET a JSON document, translating every failure into SourceError."""
        await self._limiter.acquire()
        try:
            response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise self._error(f"request failed for {symbol}: {e}", symbol, url=url) from e

        if not response.is_success:
            raise self._error(
                f"HTTP {response.status_code} for {symbol}",
                symbol,
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise self._error(f"malformed JSON for {symbol}", symbol, url=url) from e


AdapterFactory = Callable[..., SourceAdapter]


class SourceRegistry:
    """Registry of available source adapters."""

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def register(self, name: str, factory: AdapterFactory) -> None:
        if name in self._factories:
            raise ValueError(
                f"Source '{name}' is already registered. Use replace() to override."
            )
        self._factories[name] = factory

    def replace(self, name: str, factory: AdapterFactory) -> None:
        if name not in self._factories:
            raise KeyError(f"Source '{name}' is not registered.")
        self._factories[name] = factory

    def get(self, name: str) -> AdapterFactory:
        return self._factories[name]

    def list_names(self) -> list[str]:
        return list(self._factories.keys())

    def create_enabled(
        self,
        sources: SourcesConfig,
        acquisition: AcquisitionConfig,
        client: httpx.AsyncClient | None = None,
    ) -> list[SourceAdapter]:
        """Instantiate enabled, configured adapters in priority order."""
        adapters: list[SourceAdapter] = []
        for name in sources.order:
            source_config = getattr(sources, name)
            if not source_config.enabled:
                logger.debug("Source '%s' disabled in config", name)
                continue
            if hasattr(source_config, "api_key") and not source_config.api_key:
                logger.info("Source '%s' has no API key configured, skipping", name)
                continue
            factory = self._factories.get(name)
            if factory is None:
                logger.warning("Source '%s' is configured but not registered", name)
                continue
            adapters.append(factory(source_config, acquisition, client=client))
        return adapters


# Module-level singleton registry
registry = SourceRegistry()
