"""
Money Utilities - Decimal operations for product prices.

Prices arrive from the catalog as JSON numbers; they are converted once and
kept as Decimal for every cart total.
"""
import os
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

MONEY_PRECISION = Decimal("0.01")

DEFAULT_CURRENCY = os.environ.get("CART_CURRENCY", "BRL")

CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # str() keeps the short repr and avoids binary float noise
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_price(value: Number) -> Decimal:
    """
    Convert a catalog price to Decimal, rejecting missing or invalid values.

    Raises:
        ValueError: value is None, a bool, not numeric, not finite or negative
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid price: {value!r}")

    try:
        price = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Invalid price: {value!r}") from e

    if not price.is_finite() or price < 0:
        raise ValueError(f"Invalid price: {value!r}")
    return price


def round_money(value: Number) -> Decimal:
    """Round a monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON serialization.

    Use only at serialization boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def format_money(value: Number, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format monetary value with currency symbol.

    Args:
        value: Value to format
        currency: Currency code (BRL, USD, EUR, GBP)

    Returns:
        Formatted string, e.g. "R$ 179.90" or "$179.90"
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    formatted = f"{round_money(value):,.2f}"

    if currency in ("USD", "EUR", "GBP"):
        return f"{symbol}{formatted}"
    return f"{symbol} {formatted}"
