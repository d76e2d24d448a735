"""Display helpers for analytics figures (dashboard and report text)."""

from __future__ import annotations


def format_volume(volume: float) -> str:
    """$1.23M / $4.56K / $7.89."""
    if volume >= 1_000_000:
        return f"${volume / 1_000_000:.2f}M"
    if volume >= 1_000:
        return f"${volume / 1_000:.2f}K"
    return f"${volume:.2f}"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_number(value: float) -> str:
    """Thousands separators; up to 3 decimals, trailing zeros dropped."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")
