"""Price formatting for templates and the cart."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

__all__ = ["format_price", "format_price_with_symbol"]

Price = Union[int, float, str]


def _to_decimal(price: Price):
    if isinstance(price, bool):
        return None
    try:
        value = Decimal(str(price).strip())
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def format_price(price: Price) -> str:
    """Format a price for display.

    Whole amounts drop the decimals (3 -> "3"), fractional amounts always
    show two places (3.5 -> "3.50"). Numeric strings are formatted the same
    way; any other string ("£30", "free") is returned unchanged.
    """
    value = _to_decimal(price)
    if value is None:
        return str(price)
    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded == rounded.to_integral_value():
        return str(int(rounded))
    return f"{rounded:.2f}"


def format_price_with_symbol(symbol: str, price: Price) -> str:
    """Prefix a formatted numeric price with a currency symbol.

    Non-numeric strings already carry their own formatting and are returned
    unchanged.
    """
    if _to_decimal(price) is None:
        return str(price)
    return f"{symbol}{format_price(price)}"
