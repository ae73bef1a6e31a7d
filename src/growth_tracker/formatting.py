"""Display helpers for money amounts and growth percentages."""

from __future__ import annotations

_MAGNITUDES = ((1e12, "T"), (1e9, "B"), (1e6, "M"))


def format_currency(amount: float) -> str:
    """Format a dollar amount with a T/B/M suffix, e.g. ``$1.23B``."""
    if amount == 0:
        return "$0"
    for threshold, suffix in _MAGNITUDES:
        if abs(amount) >= threshold:
            return f"${amount / threshold:.2f}{suffix}"
    return f"${amount:.2f}"


def format_percentage(percentage: float) -> str:
    """Format a percentage with an explicit sign, e.g. ``+5.56%``."""
    sign = "+" if percentage >= 0 else ""
    return f"{sign}{percentage:.2f}%"
