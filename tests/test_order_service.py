from __future__ import annotations

import asyncio
from datetime import datetime
from decimal import Decimal

import pytest

from cosmo_pos.constants import OrderType, PaymentMethod
from cosmo_pos.runtime import BackgroundWrites
from cosmo_pos.schemas import CartItem, Order
from cosmo_pos.services import order_service
from cosmo_pos.services.order_state_machine import StatusCatalog
from cosmo_pos.validation import NotFoundError, ValidationError

NOW = datetime(2024, 5, 1, 12, 0, 0)


def _catalog(state):
    return StatusCatalog(state.cache.order_statuses.all())


def _fill_cart(state):
    dumplings = state.cache.products.get("1")
    tea = state.cache.products.get("6")
    state.cart.extend(
        [
            CartItem(product=dumplings, quantity=2, selected_option="Chilli Oil (+R5)"),
            CartItem(product=tea, quantity=1),
        ]
    )


def test_cash_checkout_scenario(state):
    _fill_cart(state)

    order = order_service.checkout(
        state, _catalog(state), PaymentMethod.CASH, OrderType.TAKEAWAY, tendered=300, now=NOW
    )

    assert order.total == Decimal("235.75")
    assert order.tendered == Decimal("300")
    assert order.change == Decimal("64.25")
    assert order.open_drawer is True
    assert order.status == "Pending"
    assert order.order_by == "Staff"
    assert order.id.startswith("ORD-") and len(order.id) == 10
    assert state.cart == []
    assert state.cache.orders.all()[0].id == order.id


def test_card_checkout_has_no_tender(state):
    _fill_cart(state)
    order = order_service.checkout(
        state, _catalog(state), "Card", "Dine-In", table_number=4, tendered=500, now=NOW
    )

    assert order.tendered is None
    assert order.change is None
    assert order.open_drawer is False
    assert order.table_number == 4


def test_table_number_dropped_for_takeaway(state):
    _fill_cart(state)
    order = order_service.checkout(
        state, _catalog(state), "Card", "Takeaway", table_number=4, now=NOW
    )
    assert order.table_number is None


def test_checkout_rejects_empty_cart_and_short_tender(state):
    with pytest.raises(ValidationError):
        order_service.checkout(state, _catalog(state), "Card", "Takeaway")

    _fill_cart(state)
    with pytest.raises(ValidationError):
        order_service.checkout(state, _catalog(state), "Cash", "Takeaway", tendered=200)
    assert len(state.cart) == 2


def test_stock_is_decremented_per_product_and_floored(state):
    dumplings = state.cache.products.get("1")
    state.cache.products.update(dumplings.model_copy(update={"stock": 3}))
    state.cart.extend(
        [
            CartItem(product=dumplings, quantity=2, selected_option="Steamed"),
            CartItem(product=dumplings, quantity=2, selected_option="Fried"),
            CartItem(product=state.cache.products.get("6"), quantity=5),
        ]
    )

    order_service.checkout(state, _catalog(state), "Card", "Takeaway", now=NOW)

    assert state.cache.products.get("1").stock == 0
    assert state.cache.products.get("6").stock == 195


def test_order_items_are_snapshots(state):
    _fill_cart(state)
    order = order_service.checkout(state, _catalog(state), "Card", "Takeaway", now=NOW)
    state.cache.products.update(
        state.cache.products.get("1").model_copy(update={"price": Decimal("999")})
    )
    assert order.items[0].product.price == Decimal("85")


def test_start_status_falls_back_to_preparing(state):
    state.cache.order_statuses.replace_all([])
    _fill_cart(state)
    order = order_service.checkout(state, _catalog(state), "Card", "Takeaway", now=NOW)
    assert order.status == "Preparing"


def test_signed_in_user_recorded_on_order(state):
    state.current_user = state.cache.users.get("u2")
    _fill_cart(state)
    order = order_service.checkout(state, _catalog(state), "Card", "Takeaway", now=NOW)
    assert order.order_by == "Server Sarah"


def test_order_ids_do_not_collide(state):
    first = order_service.generate_order_id(state, NOW)
    state.cache.orders.insert(
        Order(id=first, items=[], total=0, payment_method="Card", type="Takeaway", date="", status="Pending")
    )
    assert order_service.generate_order_id(state, NOW) != first


def test_connected_checkout_persists_in_background(state, store, fake_client):
    state.connected = True

    async def scenario():
        writes = BackgroundWrites(state)
        _fill_cart(state)
        order = order_service.checkout(
            state, _catalog(state), "Cash", "Takeaway", tendered=300,
            store=store, writes=writes, now=NOW,
        )
        await writes.drain()
        return order

    order = asyncio.run(scenario())

    inserted = [c for c in fake_client.calls if c["table"] == "orders" and c["op"] == "insert"]
    assert inserted[0]["payload"]["id"] == order.id
    assert inserted[0]["payload"]["change"] == 64.25
    assert "customer" not in inserted[0]["payload"]
    stock_writes = [c for c in fake_client.calls if c["table"] == "products" and c["op"] == "update"]
    assert {c["filters"][0][1] for c in stock_writes} == {"1", "6"}
    assert not state.errors


def test_failed_background_write_is_recorded_not_rolled_back(state, store, fake_client):
    state.connected = True
    fake_client.tables.pop("orders")

    async def scenario():
        writes = BackgroundWrites(state)
        _fill_cart(state)
        order = order_service.checkout(
            state, _catalog(state), "Card", "Takeaway", store=store, writes=writes, now=NOW
        )
        await writes.drain()
        return order

    order = asyncio.run(scenario())

    assert state.cache.orders.contains(order.id)
    assert any(order.id in entry.context for entry in state.errors)


def test_update_order_status_default_and_explicit(state):
    _fill_cart(state)
    order = order_service.checkout(state, _catalog(state), "Card", "Takeaway", now=NOW)

    updated = order_service.update_order_status(state, _catalog(state), order.id)
    assert updated.status == "Preparing"
    assert state.cache.orders.get(order.id).status == "Preparing"

    updated = order_service.update_order_status(state, _catalog(state), order.id, "cancelled")
    assert updated.status == "Cancelled"

    with pytest.raises(NotFoundError):
        order_service.update_order_status(state, _catalog(state), "ORD-missing")


def _history_order(order_id, status, total, staff, date, order_type="Takeaway"):
    return Order(
        id=order_id,
        items=[],
        total=total,
        payment_method="Card",
        type=order_type,
        date=date,
        status=status,
        order_by=staff,
    )


def test_order_history_filter_search_and_sort():
    orders = [
        _history_order("ORD-001", "Completed", 100, "Server Sarah", "2024-05-01 10:00:00"),
        _history_order("ORD-002", "Pending", 50, "Manager Mike", "2024-05-01 11:00:00", "Dine-In"),
        _history_order("ORD-003", "Completed", 75, "Manager Mike", "2024-05-01 09:00:00"),
    ]

    completed = order_service.order_history(orders, status="Completed")
    assert [o.id for o in completed] == ["ORD-001", "ORD-003"]

    by_staff = order_service.order_history(orders, search="mike")
    assert [o.id for o in by_staff] == ["ORD-002", "ORD-003"]

    by_type = order_service.order_history(orders, search="dine")
    assert [o.id for o in by_type] == ["ORD-002"]

    by_total = order_service.order_history(orders, sort_by="total", descending=False)
    assert [o.id for o in by_total] == ["ORD-002", "ORD-003", "ORD-001"]

    with pytest.raises(ValidationError):
        order_service.order_history(orders, sort_by="color")
