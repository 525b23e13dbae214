"""
Utility functions for the application.
"""
from decimal import Decimal
from typing import Optional, Union
from wanderlust.core.types import round_money, to_money

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "C$",
    "CNY": "¥",
    "INR": "₹",
    "SGD": "S$",
    "KRW": "₩",
    "MXN": "Mex$",
    "CHF": "Fr",
}


def currency_symbol(currency: Optional[str]) -> str:
    """Get the display symbol for a currency code, falling back to the code itself."""
    if not currency:
        return ""
    code = currency.upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_currency(amount: Union[Decimal, int, float], currency: Optional[str]) -> str:
    """Format an amount with its currency symbol, e.g. "$12.50" or "-€3.00"."""
    value = round_money(to_money(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(value):.2f}"
