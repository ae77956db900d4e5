"""
Order creation, status updates and order history.

Checkout and status changes are optimistic: the local cache changes first,
and when the terminal is connected the remote write is handed to
``BackgroundWrites``. A failed remote write is recorded, never rolled back.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from cosmo_pos.constants import (
    DEFAULT_STAFF_NAME,
    ORDER_ID_PREFIX,
    OrderType,
    PaymentMethod,
)
from cosmo_pos.datetime_utils import epoch_millis, format_order_date, localnow, parse_order_date
from cosmo_pos.runtime import BackgroundWrites
from cosmo_pos.schemas import Order
from cosmo_pos.services import cart_service
from cosmo_pos.services.order_state_machine import StatusCatalog, resolve_target_status
from cosmo_pos.services.price_service import calculate_cart_totals, calculate_change, to_decimal
from cosmo_pos.state import AppState
from cosmo_pos.supabase.client import RemoteStore
from cosmo_pos.validation import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SORT_FIELDS = {"id", "date", "total", "status", "type"}


def generate_order_id(state: AppState, now: datetime | None = None) -> str:
    """``ORD-`` plus the last six digits of the epoch milliseconds."""
    millis = epoch_millis(now)
    order_id = f"{ORDER_ID_PREFIX}{millis % 1_000_000:06d}"
    while state.cache.orders.contains(order_id):
        millis += 1
        order_id = f"{ORDER_ID_PREFIX}{millis % 1_000_000:06d}"
    return order_id


def _staff_name(state: AppState) -> str:
    return state.current_user.name if state.current_user else DEFAULT_STAFF_NAME


def checkout(
    state: AppState,
    catalog: StatusCatalog,
    payment_method: PaymentMethod,
    order_type: OrderType,
    table_number: int | None = None,
    tendered: Decimal | float | None = None,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
    now: datetime | None = None,
) -> Order:
    """
    Turn the current cart into an order.

    Raises:
        ValidationError: empty cart, or cash tendered below the total
    """
    if not state.cart:
        raise ValidationError("Cart is empty")

    payment_method = PaymentMethod(payment_method)
    order_type = OrderType(order_type)
    totals = calculate_cart_totals(state.cart, state.store_settings.tax_rate)

    paid: Decimal | None = None
    change: Decimal | None = None
    if payment_method == PaymentMethod.CASH:
        if tendered is None:
            raise ValidationError("Cash payments require the amount tendered")
        paid = to_decimal(tendered)
        if paid < totals.total:
            raise ValidationError("Amount tendered is less than the order total")
        change = calculate_change(totals.total, paid)

    order = Order(
        id=generate_order_id(state, now),
        items=[item.model_copy(deep=True) for item in state.cart],
        total=totals.total,
        payment_method=payment_method,
        type=order_type,
        table_number=table_number if order_type == OrderType.DINE_IN else None,
        date=format_order_date(now or localnow()),
        status=catalog.start_status,
        order_by=_staff_name(state),
        open_drawer=payment_method == PaymentMethod.CASH,
        tendered=paid,
        change=change,
    )

    state.cache.orders.insert(order)
    stock_updates = _decrement_stock(state, order)
    cart_service.clear(state.cart)

    logger.info(
        "Order created",
        extra={
            "order_id": order.id,
            "total": str(order.total),
            "payment_method": order.payment_method.value,
            "connected": state.connected,
        },
    )

    if state.connected and store is not None and writes is not None:
        writes.spawn(f"Add order {order.id}", store.add_order(order))
        for product_id, stock in stock_updates.items():
            writes.spawn(
                f"Update stock {product_id}", store.update_product_stock(product_id, stock)
            )
    return order


def _decrement_stock(state: AppState, order: Order) -> dict[str, int]:
    """Apply the order's quantities to local stock, floored at zero."""
    quantities: dict[str, int] = defaultdict(int)
    for item in order.items:
        quantities[item.product.id] += item.quantity

    updates: dict[str, int] = {}
    for product_id, quantity in quantities.items():
        product = state.cache.products.get(product_id)
        if product is None:
            continue
        stock = max(0, product.stock - quantity)
        state.cache.products.update(product.model_copy(update={"stock": stock}))
        updates[product_id] = stock
    return updates


def update_order_status(
    state: AppState,
    catalog: StatusCatalog,
    order_id: str,
    status: str | None = None,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
) -> Order:
    """
    Move an order to ``status``, or to the default next status when omitted.
    """
    order = state.cache.orders.get(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")

    target = resolve_target_status(catalog, order.status, status)
    updated = order.model_copy(update={"status": target})
    state.cache.orders.update(updated)
    logger.info(f"Order {order_id} status {order.status} -> {target}")

    if state.connected and store is not None and writes is not None:
        writes.spawn(f"Update order status {order_id}", store.update_order_status(order_id, target))
    return updated


def get_order(state: AppState, order_id: str) -> Order:
    order = state.cache.orders.get(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def _sort_value(order: Order, field: str):
    if field == "date":
        return parse_order_date(order.date)
    if field == "total":
        return order.total
    if field == "type":
        return order.type.value
    if field == "status":
        return order.status.lower()
    return order.id


def order_history(
    orders: list[Order],
    status: str | None = None,
    search: str | None = None,
    sort_by: str = "date",
    descending: bool = True,
) -> list[Order]:
    """
    Filter by status, search by id / staff / order type, then sort.
    """
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"Cannot sort orders by '{sort_by}'")

    results = list(orders)
    if status and status.lower() != "all":
        wanted = status.lower()
        results = [order for order in results if order.status.lower() == wanted]

    if search:
        term = search.strip().lower()
        results = [
            order
            for order in results
            if term in order.id.lower()
            or term in order.order_by.lower()
            or term in order.type.value.lower()
        ]

    results.sort(key=lambda order: _sort_value(order, sort_by), reverse=descending)
    return results
