"""Custom exception hierarchy for growth-tracker."""

from typing import Any


class GrowthTrackerError(Exception):
    """Base exception for all growth-tracker errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(GrowthTrackerError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field (str): the config field that failed validation
        value (Any): the invalid value (redacted for secrets)
    """


class SourceError(GrowthTrackerError):
    """A data source could not deliver usable data for a symbol.

    Policy: log and fall through to the next source. Never surfaced to
    callers of the acquisition pipeline.

    Context keys:
        source (str): adapter name ("fmp", "alpha_vantage", "yahoo")
        symbol (str): the ticker being fetched
        status_code (int | None): HTTP status code if applicable
    """


class InsufficientHistoryError(SourceError):
    """A source answered, but with fewer periods than the analysis needs.

    Policy (same as SourceError): treated as that source's failure.

    Context keys:
        found (int): number of usable periods after normalization
        required (int): minimum number of periods
    """


class WatchlistError(GrowthTrackerError):
    """Watchlist storage operation failed.

    Policy: raise immediately.

    Context keys:
        operation (str): "list", "add", "remove", "initialize"
        path (str): the database path
    """
