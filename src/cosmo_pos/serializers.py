"""
Serializers for consistent API responses.
"""

from typing import Any

from cosmo_pos.schemas import CartItem, Order, OrderStatus, Product, User
from cosmo_pos.services.order_state_machine import StatusCatalog
from cosmo_pos.services.price_service import (
    CartTotals,
    DEFAULT_CURRENCY_SYMBOL,
    format_money,
    line_total,
    unit_price,
)


def serialize_record(record) -> dict[str, Any]:
    """Serialize a cached record with remote column names."""
    return record.model_dump(by_alias=True, mode="json")


def serialize_product(product: Product, low_stock_threshold: int | None = None) -> dict[str, Any]:
    data = serialize_record(product)
    if low_stock_threshold is not None:
        data["lowStock"] = product.stock < low_stock_threshold
    return data


def serialize_user(user: User) -> dict[str, Any]:
    """Users never expose their PIN."""
    return user.public_dict()


def serialize_cart_item(item: CartItem, index: int) -> dict[str, Any]:
    data = serialize_record(item)
    data["index"] = index
    data["unitPrice"] = float(unit_price(item))
    data["lineTotal"] = float(line_total(item))
    return data


def serialize_cart(
    items: list[CartItem], totals: CartTotals, symbol: str = DEFAULT_CURRENCY_SYMBOL
) -> dict[str, Any]:
    return {
        "items": [serialize_cart_item(item, i) for i, item in enumerate(items)],
        "itemCount": sum(item.quantity for item in items),
        **totals.to_dict(),
        "display": {
            "subtotal": format_money(totals.subtotal, symbol),
            "tax": format_money(totals.tax, symbol),
            "total": format_money(totals.total, symbol),
        },
    }


def serialize_order(
    order: Order, catalog: StatusCatalog | None = None, symbol: str = DEFAULT_CURRENCY_SYMBOL
) -> dict[str, Any]:
    data = serialize_record(order)
    data["displayTotal"] = format_money(order.total, symbol)
    if order.change is not None:
        data["displayChange"] = format_money(order.change, symbol)
    if catalog is not None:
        data["statusColor"] = catalog.color_for(order.status)
    return data


def serialize_order_status(status: OrderStatus, catalog: StatusCatalog) -> dict[str, Any]:
    data = serialize_record(status)
    data["protected"] = catalog.is_protected(status)
    return data


def success_response(data: Any, message: str | None = None) -> dict[str, Any]:
    """Create a standardized success response."""
    response = {"status": "success", "data": data, "error": None}
    if message:
        response["message"] = message
    return response


def error_response(error: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a standardized error response."""
    response = {"status": "error", "data": None, "error": error}
    if details:
        response["details"] = details
    return response
