"""
Cart operations for the active POS session.

The cart is a plain list owned by ``AppState``; these helpers mutate it in
place and return the affected line.
"""

from __future__ import annotations

from collections.abc import Sequence

from cosmo_pos.constants import MAX_SELECTED_OPTIONS, OPTION_SEPARATOR
from cosmo_pos.logging_config import get_logger
from cosmo_pos.schemas import CartItem, Product
from cosmo_pos.validation import ValidationError

logger = get_logger(__name__)


def build_option_string(product: Product, selected: Sequence[str]) -> str:
    """
    Validate the chosen options and join them into the stored option string.

    Products that define options require at least one choice and accept at
    most three, each taken from the product's own list.
    """
    choices = [option for option in selected if option]
    available = product.options or []

    if not available:
        if choices:
            raise ValidationError(f"{product.name} has no options")
        return ""

    if not choices:
        raise ValidationError(f"Please select an option for {product.name}")
    if len(choices) > MAX_SELECTED_OPTIONS:
        raise ValidationError(f"Select at most {MAX_SELECTED_OPTIONS} options")
    unknown = [option for option in choices if option not in available]
    if unknown:
        raise ValidationError(f"Unknown option(s) for {product.name}: {', '.join(unknown)}")
    if len(set(choices)) != len(choices):
        raise ValidationError("Options may only be selected once")

    return OPTION_SEPARATOR.join(choices)


def add_item(
    cart: list[CartItem],
    product: Product,
    quantity: int = 1,
    notes: str = "",
    selected_option: str = "",
) -> CartItem:
    """
    Add a product to the cart, merging with a line that has the same product
    and the same option string.
    """
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")

    for index, item in enumerate(cart):
        if item.product.id == product.id and item.selected_option == selected_option:
            merged = item.model_copy(
                update={"quantity": item.quantity + quantity, "notes": notes or item.notes}
            )
            cart[index] = merged
            logger.debug("Merged %s into cart line %s (qty=%s)", product.id, index, merged.quantity)
            return merged

    line = CartItem(
        product=product.model_copy(deep=True),
        quantity=quantity,
        notes=notes,
        selected_option=selected_option,
    )
    cart.append(line)
    return line


def _check_index(cart: list[CartItem], index: int) -> None:
    if index < 0 or index >= len(cart):
        raise ValidationError(f"No cart line at position {index}")


def remove_item(cart: list[CartItem], index: int) -> CartItem:
    _check_index(cart, index)
    return cart.pop(index)


def update_quantity(cart: list[CartItem], index: int, delta: int) -> CartItem:
    """Adjust a line's quantity, never going below 1."""
    _check_index(cart, index)
    item = cart[index]
    updated = item.model_copy(update={"quantity": max(1, item.quantity + delta)})
    cart[index] = updated
    return updated


def update_note(cart: list[CartItem], index: int, note: str) -> CartItem:
    _check_index(cart, index)
    updated = cart[index].model_copy(update={"notes": note})
    cart[index] = updated
    return updated


def clear(cart: list[CartItem]) -> None:
    cart.clear()


def total_quantity(cart: list[CartItem]) -> int:
    return sum(item.quantity for item in cart)
