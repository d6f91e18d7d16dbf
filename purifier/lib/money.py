"""
Money amounts.

Prices and totals are stored as Numeric(12, 2); values are rounded to
paise here, before any arithmetic, so stored totals match stored prices.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

MONEY_PLACES = 2
_EXPONENT = Decimal(1).scaleb(-MONEY_PLACES)


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """Convert to a Decimal rounded half-up to two decimal places."""
    return Decimal(str(value)).quantize(_EXPONENT, rounding=ROUND_HALF_UP)
