from __future__ import annotations

from decimal import Decimal

import pytest

from cosmo_pos.schemas import CartItem, Product
from cosmo_pos.services.price_service import (
    calculate_cart_totals,
    calculate_change,
    format_money,
    line_total,
    option_surcharge,
    unit_price,
)


@pytest.mark.parametrize(
    "option, expected",
    [
        ("", Decimal("0")),
        (None, Decimal("0")),
        ("Steamed", Decimal("0")),
        ("Chilli Oil (+R5)", Decimal("5")),
        ("Fried (+R5), Chilli Oil (+R2.50)", Decimal("7.50")),
        ("Prawn (+R15), Steamed", Decimal("15")),
        ("Extra (+R)", Decimal("0")),
    ],
)
def test_option_surcharge_sums_every_token(option, expected):
    assert option_surcharge(option) == expected


def test_unit_price_adds_surcharge_to_base_price(dumplings):
    item = CartItem(product=dumplings, quantity=3, selected_option="Chilli Oil (+R5)")
    assert unit_price(item) == Decimal("90")
    assert line_total(item) == Decimal("270")


def test_scenario_totals(scenario_cart):
    totals = calculate_cart_totals(scenario_cart, 0.15)

    assert totals.subtotal == Decimal("205")
    assert totals.tax == Decimal("30.75")
    assert totals.total == Decimal("235.75")


def test_totals_keep_full_precision_until_display():
    product = Product(id="x", name="Odd", price="10.01")
    totals = calculate_cart_totals([CartItem(product=product, quantity=3)], Decimal("0.15"))

    assert totals.subtotal == Decimal("30.03")
    assert totals.tax == Decimal("4.5045")
    assert format_money(totals.total) == "R 34.53"


def test_empty_cart_totals_are_zero():
    totals = calculate_cart_totals([], 0.15)
    assert totals.total == Decimal("0")


def test_change_and_format():
    change = calculate_change(Decimal("235.75"), 300)
    assert change == Decimal("64.25")
    assert format_money(change) == "R 64.25"
    assert format_money(Decimal("5")) == "R 5.00"
