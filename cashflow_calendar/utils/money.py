"""Fixed-point money helpers; the engine works in integer cents"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

Amount = Union[int, float, Decimal, str]

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}


def to_cents(amount: Amount) -> int:
    """
    Convert a major-unit amount (e.g. dollars) to integer cents, rounding half up.

    Raises:
        ValueError: Amount is not a finite number
    """
    if isinstance(amount, bool):
        raise ValueError("Amount must be a number")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Amount must be finite: {amount!r}")

    try:
        return int(value.quantize(CENT, rounding=ROUND_HALF_UP) * 100)
    except InvalidOperation as e:
        # More significant digits than the decimal context holds (e.g. 1e30)
        raise ValueError(f"Amount is too large: {amount!r}") from e


def from_cents(cents: int) -> float:
    """Convert integer cents back to a major-unit number for display/serialization"""
    return float(Decimal(cents) / 100)


def is_finite_amount(amount: object) -> bool:
    if amount is None or isinstance(amount, bool):
        return False
    try:
        return math.isfinite(float(amount))
    except (TypeError, ValueError):
        return False


def format_money(cents: int, currency: str = "USD") -> str:
    """Format cents for humans: -$1,234.56, or '1,234.56 SEK' for currencies without a symbol"""
    sign = "-" if cents < 0 else ""
    body = f"{abs(cents) / 100:,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper()) if currency else None
    if symbol:
        return f"{sign}{symbol}{body}"
    return f"{sign}{body} {currency.upper() if currency else ''}".rstrip()
