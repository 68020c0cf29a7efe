"""
Portfolio valuation: melt value, cost basis, and profit/loss.

Everything here is a pure function of a Portfolio and a SpotQuote. Values
are exact Decimals, recomputed from scratch on every call; rounding is left
to the display layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .models import DailyChange, Holding, Metal, Portfolio, SpotQuote

ZERO = Decimal("0")
RECENT_HOLDINGS_LIMIT = 5


@dataclass(frozen=True)
class ValuationSummary:
    """Totals for a portfolio at one spot quote."""

    total_ozt: dict[Metal, Decimal]
    melt_value: dict[Metal, Decimal]
    total_melt_value: Decimal
    total_cost: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal
    daily_change: dict[Metal, DailyChange]

    @property
    def total_silver_ozt(self) -> Decimal:
        return self.total_ozt[Metal.SILVER]

    @property
    def total_gold_ozt(self) -> Decimal:
        return self.total_ozt[Metal.GOLD]

    @property
    def silver_melt_value(self) -> Decimal:
        return self.melt_value[Metal.SILVER]

    @property
    def gold_melt_value(self) -> Decimal:
        return self.melt_value[Metal.GOLD]

    @property
    def is_profit(self) -> bool:
        return self.profit_loss >= 0


def total_ozt(holdings: tuple[Holding, ...] | list[Holding]) -> Decimal:
    return sum((h.total_ozt for h in holdings), ZERO)


def total_cost(holdings: tuple[Holding, ...] | list[Holding]) -> Decimal:
    return sum((h.cost for h in holdings), ZERO)


def holding_melt_value(holding: Holding, quote: SpotQuote) -> Decimal:
    """Melt value of one lot at the quote's spot price for its metal."""
    return holding.total_ozt * quote.price(holding.metal)


def profit_loss_percent(profit_loss: Decimal, cost: Decimal) -> Decimal:
    """Profit/loss as a percentage of cost. Zero cost gives exactly 0."""
    if cost > 0:
        return profit_loss / cost * 100
    return ZERO


def calculate_valuation(portfolio: Portfolio, quote: SpotQuote) -> ValuationSummary:
    ounces = {metal: total_ozt(portfolio.holdings(metal)) for metal in Metal}
    melt = {metal: ounces[metal] * quote.price(metal) for metal in Metal}
    total_melt = melt[Metal.SILVER] + melt[Metal.GOLD]
    cost = total_cost(portfolio.all_holdings())
    profit_loss = total_melt - cost

    return ValuationSummary(
        total_ozt=ounces,
        melt_value=melt,
        total_melt_value=total_melt,
        total_cost=cost,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss_percent(profit_loss, cost),
        daily_change={metal: quote.change(metal) for metal in Metal},
    )


def recent_holdings(portfolio: Portfolio, limit: int = RECENT_HOLDINGS_LIMIT) -> list[Holding]:
    """Most recently purchased holdings across both metals, newest first."""
    return sorted(portfolio.all_holdings(), key=lambda h: h.date, reverse=True)[:limit]
