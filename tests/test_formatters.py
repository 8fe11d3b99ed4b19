"""Tests for display formatting."""

from datetime import datetime
from decimal import Decimal

from src.ledger.formatters import (
    amount_tone,
    capitalize_first,
    format_currency,
    format_date,
    format_datetime,
    format_display_time,
    format_signed_amount,
)


class TestFormatters:
    def test_currency(self):
        assert format_currency(Decimal("1234.5")) == "₹1,234.50"
        assert format_currency(Decimal("-75")) == "-₹75.00"
        assert format_currency(0, symbol="$") == "$0.00"

    def test_signed_amount(self):
        assert format_signed_amount(Decimal("500")) == "+₹500.00"
        assert format_signed_amount(Decimal("-120")) == "-₹120.00"

    def test_amount_tone(self):
        assert amount_tone(Decimal("1")) == "income"
        assert amount_tone(Decimal("-1")) == "expense"

    def test_dates(self):
        moment = datetime(2024, 1, 5, 14, 30)
        assert format_date(moment) == "5 Jan 2024"
        assert format_datetime(moment) == "5 Jan 2024, 02:30 PM"
        assert format_display_time(moment) == "01/05/2024, 02:30 PM"

    def test_capitalize_first(self):
        assert capitalize_first("groceries and more") == "Groceries and more"
        assert capitalize_first("") == ""
