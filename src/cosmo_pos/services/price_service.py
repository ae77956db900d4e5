"""
Price calculation for cart lines and orders.

Option strings may carry surcharge tokens such as ``"Chilli Oil (+R5)"``;
every token found in the selected option string is added to the unit
price. All arithmetic uses ``Decimal`` without intermediate rounding; values
are rounded to two places only when formatted for display.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from cosmo_pos.schemas import CartItem

SURCHARGE_PATTERN = re.compile(r"\(\+R([\d.]+)\)")

CENTS = Decimal("0.01")
DEFAULT_CURRENCY_SYMBOL = "R"
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def option_surcharge(option: str | None) -> Decimal:
    """
    Sum every ``(+R<number>)`` token in an option string.

    Examples:
        "Fried (+R5), Chilli Oil (+R2.50)" -> Decimal("7.50")
        "Steamed" -> Decimal("0")
    """
    if not option:
        return ZERO
    total = ZERO
    for match in SURCHARGE_PATTERN.finditer(option):
        try:
            total += Decimal(match.group(1))
        except InvalidOperation:
            # Tokens like "(+R.)" carry no amount.
            continue
    return total


def unit_price(item: CartItem) -> Decimal:
    return to_decimal(item.product.price) + option_surcharge(item.selected_option)


def line_total(item: CartItem) -> Decimal:
    return unit_price(item) * item.quantity


def cart_subtotal(items: Iterable[CartItem]) -> Decimal:
    return sum((line_total(item) for item in items), ZERO)


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal

    def to_dict(self) -> dict[str, float]:
        return {
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "total": float(self.total),
        }


def calculate_cart_totals(items: Iterable[CartItem], tax_rate) -> CartTotals:
    """
    Calculate subtotal, tax and the tax-inclusive total for a cart.

    Args:
        items: Cart lines
        tax_rate: Tax rate as a fraction (e.g. 0.15 for 15%)
    """
    subtotal = cart_subtotal(items)
    tax = subtotal * to_decimal(tax_rate)
    return CartTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def calculate_change(total, tendered) -> Decimal:
    return to_decimal(tendered) - to_decimal(total)


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, ROUND_HALF_UP)


def format_money(value, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Display form, e.g. ``R 235.75``."""
    return f"{symbol} {round_money(value):.2f}"
