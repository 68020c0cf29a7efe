"""Tests for stacktracker.portfolio.display."""

from decimal import Decimal

from stacktracker.portfolio.display import (
    format_change,
    format_currency,
    format_decimal,
    format_ounces,
    format_percent,
)
from stacktracker.portfolio.models import DailyChange, Metal


class TestFormatting:
    def test_currency(self):
        assert format_currency(Decimal("1234.5")) == "$1,234.50"
        assert format_currency(Decimal("-20")) == "-$20.00"
        assert format_currency(Decimal("0.005")) == "$0.01"

    def test_ounces_precision_by_metal(self):
        assert format_ounces(Decimal("10.12345"), Metal.SILVER) == "10.12 oz"
        assert format_ounces(Decimal("0.12345"), Metal.GOLD) == "0.1235 oz"

    def test_percent(self):
        assert format_percent(Decimal("-6.25")) == "-6.25%"

    def test_change_positive(self):
        change = DailyChange(amount=Decimal("12.5"), percent=Decimal("0.48"))
        assert format_change(change) == "+$12.50 (+0.48%)"

    def test_change_negative(self):
        change = DailyChange(amount=Decimal("-0.3"), percent=Decimal("-1"))
        assert format_change(change) == "-$0.30 (-1.00%)"

    def test_change_unknown(self):
        assert format_change(DailyChange()) is None
        assert format_change(DailyChange(amount=Decimal("1"))) is None

    def test_decimal_drops_trailing_zeros(self):
        assert format_decimal(Decimal("1.0")) == "1"
        assert format_decimal(Decimal("0.10")) == "0.1"
        assert format_decimal(Decimal("10")) == "10"
