"""growth_tracker.core: foundation types, config, and exceptions."""

from growth_tracker.core.config import (
    AcquisitionConfig,
    AlphaVantageConfig,
    FMPConfig,
    RefreshConfig,
    SourcesConfig,
    TrackerConfig,
    WatchlistConfig,
    YahooConfig,
    load_config,
)
from growth_tracker.core.exceptions import (
    ConfigError,
    GrowthTrackerError,
    InsufficientHistoryError,
    SourceError,
    WatchlistError,
)
from growth_tracker.core.models import (
    SYNTHETIC_SOURCE,
    AcquisitionResult,
    AnalysisSummary,
    FinancialPeriod,
    PeriodType,
    PriceQuote,
    SourceName,
    Stock,
    Ticker,
)

__all__ = [
    # Type aliases
    "Ticker",
    "SourceName",
    "SYNTHETIC_SOURCE",
    # Enums
    "PeriodType",
    # Models
    "Stock",
    "FinancialPeriod",
    "AcquisitionResult",
    "PriceQuote",
    "AnalysisSummary",
    # Config
    "TrackerConfig",
    "SourcesConfig",
    "FMPConfig",
    "AlphaVantageConfig",
    "YahooConfig",
    "AcquisitionConfig",
    "RefreshConfig",
    "WatchlistConfig",
    "load_config",
    # Exceptions
    "GrowthTrackerError",
    "ConfigError",
    "SourceError",
    "InsufficientHistoryError",
    "WatchlistError",
]
