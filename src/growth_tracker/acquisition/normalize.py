"""Normalization helpers shared by all source adapters.

Providers disagree on nearly every encoding: dates arrive as epoch seconds,
ISO strings, locale strings or ``{"raw": ..., "fmt": ...}`` wrappers, and
numbers arrive as floats, numeric strings or the literal ``"None"``. These
helpers turn all of that into the canonical ``FinancialPeriod`` shape.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Iterable

import pandas as pd

from growth_tracker.core.exceptions import InsufficientHistoryError
from growth_tracker.core.models import FinancialPeriod, PeriodType

logger = logging.getLogger(__name__)

_MISSING_TOKENS = {"", "none", "null", "nan", "-", "n/a"}


def coerce_date(value: Any) -> date:
    """Coerce a provider date encoding to a calendar date.

    Raises
    ------
    ValueError
        If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Unsupported date value: {value!r}")
    if isinstance(value, int | float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Unsupported date value: {value!r}")
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc).date()
        except (OverflowError, OSError) as e:
            raise ValueError(f"Epoch out of range: {value!r}") from e
    if isinstance(value, dict):
        if value.get("raw") is not None:
            return coerce_date(value["raw"])
        if value.get("fmt"):
            return coerce_date(value["fmt"])
        raise ValueError(f"Date wrapper has neither raw nor fmt: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date string")
        if len(text) == 8 and text.isdigit():
            # Compact YYYYMMDD, else an 8-digit epoch
            try:
                return datetime.strptime(text, "%Y%m%d").date()
            except ValueError:
                pass
        if text.lstrip("-").isdigit():
            return coerce_date(int(text))
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        parsed = pd.to_datetime(text)
        if pd.isna(parsed):
            raise ValueError(f"Unparseable date string: {value!r}")
        return parsed.date()
    raise ValueError(f"Unsupported date value: {value!r}")


def to_float(value: Any) -> float | None:
    """Coerce a provider number to float, or None when it is missing."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        return to_float(value.get("raw"))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text.lower() in _MISSING_TOKENS:
            return None
        value = text
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def first_present(mapping: dict[str, Any], *keys: str) -> Any:
    """Return the first value among ``keys`` that is present and not None."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def resolve_eps(eps: Any, net_income: Any = None, shares_outstanding: Any = None) -> float:
    """Return reported EPS, else net income per share, else 0.0."""
    direct = to_float(eps)
    if direct is not None:
        return direct
    income = to_float(net_income)
    shares = to_float(shares_outstanding)
    if income is not None and shares:
        return income / shares
    return 0.0


def build_period(
    symbol: str,
    period: PeriodType,
    raw_date: Any,
    revenue: Any,
    eps: float,
) -> FinancialPeriod | None:
    """Build one canonical period, or None if the row is unusable."""
    try:
        period_date = coerce_date(raw_date)
    except ValueError:
        logger.debug("Skipping %s row with unparseable date: %r", symbol, raw_date)
        return None

    revenue_value = to_float(revenue)
    if revenue_value is None:
        logger.debug("Skipping %s row for %s without revenue", symbol, period_date)
        return None

    return FinancialPeriod(
        date=period_date,
        symbol=symbol,
        period=period,
        revenue=revenue_value,
        eps=eps,
    )


def require_history(
    records: Iterable[FinancialPeriod | None],
    min_periods: int,
    source: str,
    symbol: str,
) -> list[FinancialPeriod]:
    """Drop unusable rows, sort newest first, and enforce a minimum length.

    Raises
    ------
    InsufficientHistoryError
        If fewer than ``min_periods`` usable periods remain.
    """
    usable = sorted(
        (r for r in records if r is not None),
        key=lambda r: r.date,
        reverse=True,
    )
    if len(usable) < min_periods:
        raise InsufficientHistoryError(
            f"{source} returned {len(usable)} usable periods for {symbol}, "
            f"need {min_periods}",
            context={
                "source": source,
                "symbol": symbol,
                "found": len(usable),
                "required": min_periods,
            },
        )
    return usable
