"""Tests for stacktracker.portfolio.valuation."""

from dataclasses import replace
from decimal import Decimal

import pytest

from stacktracker.portfolio.models import DailyChange, Holding, Metal, Portfolio, SpotQuote
from stacktracker.portfolio.valuation import (
    calculate_valuation,
    holding_melt_value,
    profit_loss_percent,
    recent_holdings,
)


def _holding(holding_id, metal, ozt, quantity, price, date="2024-01-01"):
    return Holding(
        id=holding_id,
        metal=metal,
        product=f"Lot {holding_id}",
        ozt_per_unit=ozt,
        quantity=quantity,
        unit_price=price,
        date=date,
    )


class TestCalculateValuation:
    def test_single_silver_eagle_scenario(self, eagle, quote):
        portfolio = Portfolio(silver=(replace(eagle, id="1"),))
        summary = calculate_valuation(portfolio, quote)

        assert summary.total_silver_ozt == Decimal("10")
        assert summary.silver_melt_value == Decimal("300")
        assert summary.total_cost == Decimal("320")
        assert summary.profit_loss == Decimal("-20")
        assert summary.profit_loss_percent == Decimal("-6.25")
        assert not summary.is_profit

    def test_empty_portfolio(self, quote):
        summary = calculate_valuation(Portfolio(), quote)
        assert summary.total_melt_value == 0
        assert summary.total_cost == 0
        assert summary.profit_loss_percent == 0

    def test_zero_cost_gives_zero_percent(self, quote):
        gift = _holding("g", Metal.GOLD, 1, 1, 0)
        summary = calculate_valuation(Portfolio(gold=(gift,)), quote)
        assert summary.total_melt_value == Decimal("2600")
        assert summary.profit_loss == Decimal("2600")
        assert summary.profit_loss_percent == 0

    def test_metal_totals_are_independent(self, quote):
        silver = (_holding("s1", Metal.SILVER, 1, 10, 25), _holding("s2", Metal.SILVER, 10, 2, 280))
        gold = (_holding("g1", Metal.GOLD, Decimal("0.1"), 5, 300),)

        silver_only = calculate_valuation(Portfolio(silver=silver), quote)
        both = calculate_valuation(Portfolio(silver=silver, gold=gold), quote)

        assert silver_only.total_silver_ozt == Decimal("30")
        assert both.total_silver_ozt == silver_only.total_silver_ozt
        assert both.total_gold_ozt == Decimal("0.5")
        assert both.gold_melt_value == Decimal("1300")

    def test_mixed_portfolio_totals(self, eagle, maple, quote):
        portfolio = Portfolio(silver=(replace(eagle, id="1"),), gold=(replace(maple, id="2"),))
        summary = calculate_valuation(portfolio, quote)

        assert summary.melt_value == {Metal.SILVER: Decimal("300"), Metal.GOLD: Decimal("1040")}
        assert summary.total_melt_value == Decimal("1340")
        assert summary.total_cost == Decimal("1482")
        assert summary.profit_loss == Decimal("-142")
        assert summary.profit_loss_percent == pytest.approx(Decimal("-9.5816"), abs=Decimal("0.0001"))

    def test_default_quote_values_everything_at_zero(self, eagle):
        summary = calculate_valuation(Portfolio(silver=(replace(eagle, id="1"),)), SpotQuote())
        assert summary.total_melt_value == 0
        assert summary.profit_loss == Decimal("-320")
        assert summary.profit_loss_percent == Decimal("-100")

    def test_daily_change_passes_through(self):
        change = DailyChange(amount=Decimal("1.5"), percent=Decimal("0.05"))
        quote = SpotQuote(silver=Decimal("30"), gold=Decimal("2600"), gold_change=change)
        summary = calculate_valuation(Portfolio(), quote)
        assert summary.daily_change[Metal.GOLD] == change
        assert summary.daily_change[Metal.SILVER] == DailyChange()

    def test_recomputes_each_call(self, eagle, quote):
        portfolio = Portfolio(silver=(replace(eagle, id="1"),))
        first = calculate_valuation(portfolio, quote)
        second = calculate_valuation(portfolio, replace(quote, silver=Decimal("40")))
        assert first.silver_melt_value == Decimal("300")
        assert second.silver_melt_value == Decimal("400")


class TestHelpers:
    def test_holding_melt_value(self, maple, quote):
        assert holding_melt_value(maple, quote) == Decimal("1040")

    def test_profit_loss_percent(self):
        assert profit_loss_percent(Decimal("50"), Decimal("200")) == Decimal("25")
        assert profit_loss_percent(Decimal("50"), Decimal("0")) == 0

    def test_recent_holdings_sorted_newest_first(self):
        holdings = [_holding(str(i), Metal.SILVER, 1, 1, 1, date=f"2024-0{i}-01") for i in range(1, 8)]
        gold = _holding("g", Metal.GOLD, 1, 1, 1, date="2024-05-15")
        portfolio = Portfolio(silver=tuple(holdings), gold=(gold,))

        recent = recent_holdings(portfolio)
        assert [h.id for h in recent] == ["7", "6", "g", "5", "4"]

    def test_recent_holdings_limit(self, eagle):
        portfolio = Portfolio(silver=(replace(eagle, id="1"),))
        assert recent_holdings(portfolio, limit=0) == []
        assert len(recent_holdings(portfolio)) == 1
