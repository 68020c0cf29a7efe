"""Text formatting for the command-line views. Rounding happens only here."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .models import DailyChange, Metal

_OUNCE_PLACES = {Metal.SILVER: 2, Metal.GOLD: 4}


def _quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    """US dollars with thousands separators, e.g. -$1,234.50."""
    amount = _quantize(Decimal(value), 2)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_ounces(value: Decimal, metal: Metal) -> str:
    """Troy ounces: 2 places for silver, 4 for gold."""
    places = _OUNCE_PLACES[metal]
    return f"{_quantize(Decimal(value), places):,.{places}f} oz"


def format_percent(value: Decimal) -> str:
    return f"{_quantize(Decimal(value), 2):.2f}%"


def format_change(change: DailyChange) -> str | None:
    """Daily change as '+$1.23 (+0.45%)'. None when either figure is unknown."""
    if not change.is_known:
        return None
    sign = "+" if change.amount >= 0 else ""
    return f"{sign}{format_currency(change.amount)} ({sign}{format_percent(change.percent)})"


def format_decimal(value: Decimal) -> str:
    """Plain number without trailing zeros: 1.0 -> '1', 0.10 -> '0.1'."""
    return f"{Decimal(value).normalize():f}"
