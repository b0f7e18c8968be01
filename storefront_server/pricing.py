"""Order pricing rules."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from pydantic import BaseModel

from .models import CENT, CartLine

FREE_SHIPPING_THRESHOLD = Decimal("100.00")
FLAT_SHIPPING = Decimal("9.99")


class OrderTotals(BaseModel):
    """Subtotal, shipping and total for a set of cart lines."""

    subtotal: Decimal
    shipping: Decimal
    total: Decimal


def subtotal(lines: Iterable[CartLine]) -> Decimal:
    """Sum of price x quantity over all lines."""
    return sum((line.line_total for line in lines), Decimal("0"))


def shipping_for(amount: Decimal) -> Decimal:
    """Shipping is free strictly above the threshold."""
    if amount > FREE_SHIPPING_THRESHOLD:
        return Decimal("0.00")
    return FLAT_SHIPPING


def compute_totals(lines: Iterable[CartLine]) -> OrderTotals:
    amount = subtotal(lines)
    shipping = shipping_for(amount)
    return OrderTotals(subtotal=amount, shipping=shipping, total=amount + shipping)


def format_money(value: Decimal) -> str:
    """Format a currency amount for display, e.g. ``$109.98``."""
    return f"${value.quantize(CENT, rounding=ROUND_HALF_UP)}"
