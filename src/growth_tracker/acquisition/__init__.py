"""growth_tracker.acquisition: multi-source financial data acquisition.

Architecture
------------
    Provider → SourceAdapter → list[FinancialPeriod] → AcquisitionPipeline → Engine

- ``SourceAdapter``: one upstream provider, normalized to ``FinancialPeriod``.
- ``AcquisitionPipeline``: tries adapters in priority order and degrades to
  ``SyntheticDataGenerator`` when all of them fail.

Built-in sources (registered under their config names):

- ``fmp``: Financial Modeling Prep.
- ``alpha_vantage``: Alpha Vantage.
- ``yahoo``: Yahoo Finance.
"""

from growth_tracker.acquisition.alpha_vantage import AlphaVantageAdapter
from growth_tracker.acquisition.base import (
    AdapterFactory,
    HttpSourceAdapter,
    SourceAdapter,
    SourceRegistry,
    registry,
)
from growth_tracker.acquisition.fmp import FMPAdapter
from growth_tracker.acquisition.pipeline import AcquisitionPipeline
from growth_tracker.acquisition.synthetic import SyntheticDataGenerator, synthetic_price
from growth_tracker.acquisition.yahoo import YahooFinanceAdapter

# Register built-in sources
registry.register("fmp", FMPAdapter.from_config)
registry.register("alpha_vantage", AlphaVantageAdapter.from_config)
registry.register("yahoo", YahooFinanceAdapter.from_config)

__all__ = [
    # Protocols and base classes
    "SourceAdapter",
    "HttpSourceAdapter",
    "AdapterFactory",
    "SourceRegistry",
    "registry",
    # Sources
    "FMPAdapter",
    "AlphaVantageAdapter",
    "YahooFinanceAdapter",
    # Fallback
    "SyntheticDataGenerator",
    "synthetic_price",
    # Orchestration
    "AcquisitionPipeline",
]
