"""
Currency conversion and amount formatting for Trip Splitter

All balances are expressed in the canonical currency (CAD). Costs keep
their original currency on the activity and are converted on every read.
"""
from __future__ import annotations
from dataclasses import dataclass

from models import Currency

CANONICAL_CURRENCY = Currency.CAD
DEFAULT_USD_RATE = 1.35  # 1 USD = 1.35 CAD


@dataclass(frozen=True)
class CurrencyConverter:
    """Converts amounts to the canonical currency at a fixed rate"""
    usd_rate: float = DEFAULT_USD_RATE

    def to_canonical(self, amount: float, currency: Currency) -> float:
        """Convert amount to CAD. No rounding is applied."""
        if currency == Currency.USD:
            return amount * self.usd_rate
        return amount


DEFAULT_CONVERTER = CurrencyConverter()


def to_canonical(amount: float, currency: Currency) -> float:
    """Convert amount to CAD with the default rate"""
    return DEFAULT_CONVERTER.to_canonical(amount, currency)


def format_amount(amount: float) -> str:
    """Format as a plain two-decimal number, e.g. "12.34". Never prints "-0.00"."""
    return f"{round(amount, 2) + 0.0:.2f}"


def format_signed_amount(amount: float) -> str:
    """
    Format as a dollar amount with the sign in front of the symbol.

    Examples:
        format_signed_amount(12.3) -> "$12.30"
        format_signed_amount(-12.34) -> "-$12.34"
    """
    cents = round(amount, 2)
    if cents < 0:
        return f"-${-cents:.2f}"
    return f"${abs(cents):.2f}"
