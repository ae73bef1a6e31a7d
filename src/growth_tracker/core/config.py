"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from growth_tracker.core.exceptions import ConfigError
from growth_tracker.core.models import PeriodType

KNOWN_SOURCES = ("fmp", "alpha_vantage", "yahoo")


class FMPConfig(BaseModel):
    """Financial Modeling Prep access configuration."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    enabled: bool = True
    api_key: str | None = None
    base_url: str = "https://financialmodelingprep.com/api/v3"
    timeout: float = 5.0
    rate_limit: int = 5
    limit: int = 12

    @field_validator("limit")
    @classmethod
    def limit_covers_year_ago(cls, v: int) -> int:
        if v < 5:
            raise ValueError("limit must be >= 5 to cover the year-ago quarter")
        return v


class AlphaVantageConfig(BaseModel):
    """Alpha Vantage access configuration. Uses the public demo key by default."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    enabled: bool = True
    api_key: str = "demo"
    base_url: str = "https://www.alphavantage.co/query"
    timeout: float = 5.0
    rate_limit: int = 1


class YahooConfig(BaseModel):
    """Yahoo Finance access configuration (unauthenticated endpoints)."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    base_url: str = "https://query2.finance.yahoo.com"
    timeout: float = 5.0
    rate_limit: int = 2


class SourcesConfig(BaseModel):
    """Data sources and the priority order in which they are tried."""

    model_config = ConfigDict(frozen=True)

    order: list[str] = list(KNOWN_SOURCES)
    fmp: FMPConfig = FMPConfig()
    alpha_vantage: AlphaVantageConfig = AlphaVantageConfig()
    yahoo: YahooConfig = YahooConfig()

    @field_validator("order", mode="before")
    @classmethod
    def order_from_text(cls, v: object) -> object:
        # Env values arrive as "yahoo" or "yahoo,fmp"
        if isinstance(v, str):
            return [name for name in v.split(",") if name.strip()]
        return v

    @field_validator("order")
    @classmethod
    def order_known_and_unique(cls, v: list[str]) -> list[str]:
        names = [name.strip().lower() for name in v]
        unknown = [name for name in names if name not in KNOWN_SOURCES]
        if unknown:
            raise ValueError(
                f"unknown source(s) in order: {unknown}. "
                f"Known sources: {list(KNOWN_SOURCES)}"
            )
        if len(set(names)) != len(names):
            raise ValueError("order must not list a source twice")
        return names


class AcquisitionConfig(BaseModel):
    """Acquisition pipeline behavior."""

    model_config = ConfigDict(frozen=True)

    period: PeriodType = PeriodType.QUARTER
    min_periods: int = 5
    adapter_timeout: float = 5.0
    synthetic_seed: int | None = None

    @field_validator("min_periods")
    @classmethod
    def min_periods_covers_year_ago(cls, v: int) -> int:
        if v < 5:
            raise ValueError("min_periods must be >= 5")
        return v

    @field_validator("adapter_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("adapter_timeout must be > 0")
        return v


class RefreshConfig(BaseModel):
    """Watchlist refresh behavior."""

    model_config = ConfigDict(frozen=True)

    max_concurrent: int = 1

    @field_validator("max_concurrent")
    @classmethod
    def max_concurrent_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent must be >= 1")
        return v


class WatchlistConfig(BaseModel):
    """Watchlist storage configuration."""

    model_config = ConfigDict(frozen=True)

    path: str = "./data/watchlist.db"


class TrackerConfig(BaseModel):
    """Root configuration for the entire growth-tracker system."""

    model_config = ConfigDict(frozen=True)

    sources: SourcesConfig = SourcesConfig()
    acquisition: AcquisitionConfig = AcquisitionConfig()
    refresh: RefreshConfig = RefreshConfig()
    watchlist: WatchlistConfig = WatchlistConfig()


ENV_PREFIX = "GROWTH_TRACKER_"
DEFAULT_CONFIG_FILE = "growth-tracker.yml"


def load_config(
    config_path: str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> TrackerConfig:
    """Build the tracker configuration.

    Layers, lowest priority first:
    1. Built-in model defaults
    2. YAML file: ``config_path``, else ``<prefix>CONFIG``, else
       ``growth-tracker.yml`` in the working directory
    3. Environment variables, ``__`` between nesting levels:
       GROWTH_TRACKER_SOURCES__FMP__API_KEY=...  ->  sources.fmp.api_key

    Environment values are handed to the models as text and pydantic
    converts them to each field's type, so ``"6"`` becomes an int for
    ``refresh.max_concurrent`` while an API key like ``"00123"`` stays as-is.
    """
    try:
        path = _find_config_file(config_path, env_prefix)
        file_values = _read_config_file(path) if path is not None else {}
        values = _deep_merge(file_values, _env_overrides(env_prefix))
        return TrackerConfig.model_validate(values)
    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _find_config_file(explicit: str | None, env_prefix: str) -> Path | None:
    env_var = f"{env_prefix}CONFIG"
    for value, origin in ((explicit, "config_path"), (os.environ.get(env_var), env_var)):
        if not value:
            continue
        path = Path(value)
        if not path.is_file():
            raise ConfigError(
                f"Config file not found: {value} (from {origin})",
                context={"field": origin, "value": value},
            )
        return path

    fallback = Path(DEFAULT_CONFIG_FILE)
    return fallback if fallback.is_file() else None


def _read_config_file(path: Path) -> dict:
    context = {"field": "config_file", "value": str(path)}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config: {e}", context=context) from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}", context=context) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping, got {type(data).__name__}",
            context=context,
        )
    return data


def _env_overrides(prefix: str) -> dict:
    """Collect ``<prefix>A__B=value`` variables into ``{"a": {"b": "value"}}``.

    Values stay strings. Names are visited in sorted order, so ``X__Y``
    always comes after ``X`` and a nested setting wins over a scalar one.
    """
    overrides: dict = {}
    for name in sorted(os.environ):
        if not name.startswith(prefix):
            continue
        keys = [key.lower() for key in name[len(prefix) :].split("__")]
        if keys == ["config"] or not all(keys):
            continue

        node = overrides
        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[keys[-1]] = os.environ[name]
    return overrides


def _deep_merge(base: dict, overrides: dict) -> dict:
    """Return a new dict with ``overrides`` laid over ``base``, recursing into mappings."""
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged
