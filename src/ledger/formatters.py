"""Display formatting for amounts and timestamps."""

from datetime import date, datetime
from decimal import Decimal
from typing import Union

Number = Union[Decimal, int, float]

CURRENCY_SYMBOL = "₹"


def format_currency(amount: Number, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount as e.g. ₹1,234.50 or -₹75.00."""
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_signed_amount(amount: Number, symbol: str = CURRENCY_SYMBOL) -> str:
    """History-list style: +₹500.00 for income, -₹120.00 for expenses."""
    value = Decimal(str(amount))
    prefix = "+" if value >= 0 else "-"
    return f"{prefix}{format_currency(abs(value), symbol)}"


def amount_tone(amount: Number) -> str:
    """'income' for non-negative amounts, 'expense' otherwise."""
    return "income" if amount >= 0 else "expense"


def format_date(value: Union[date, datetime]) -> str:
    """15 Jan 2024"""
    return f"{value.day} {value.strftime('%b %Y')}"


def format_datetime(value: datetime) -> str:
    """15 Jan 2024, 10:30 AM"""
    return f"{format_date(value)}, {value.strftime('%I:%M %p')}"


def format_display_time(value: datetime) -> str:
    """01/15/2024, 10:30 AM - the stamp shown next to each history entry."""
    return value.strftime("%m/%d/%Y, %I:%M %p")


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]
