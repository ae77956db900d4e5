"""
Admin configuration of products, staff, kitchen screens, order statuses and
categories, plus the inventory views built on the product list.

Products and users change locally first and are persisted in the
background. Kitchen screens, statuses and categories are written to the
remote store only when connected and reach the cache through the realtime
feed; offline they are edited locally.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta

from cosmo_pos.constants import NoticeType, Roles
from cosmo_pos.datetime_utils import localnow
from cosmo_pos.logging_config import get_logger
from cosmo_pos.runtime import BackgroundWrites
from cosmo_pos.schemas import (
    CategoryItem,
    CreateKitchenScreenRequest,
    CreateOrderStatusRequest,
    CreateUserRequest,
    KitchenScreen,
    OrderStatus,
    Product,
    ProductRequest,
    User,
)
from cosmo_pos.security import hash_pin
from cosmo_pos.services.order_state_machine import is_protected_label
from cosmo_pos.state import AppState, EntityCollection
from cosmo_pos.supabase.client import RemoteStore
from cosmo_pos.validation import NotFoundError, ValidationError

logger = get_logger(__name__)

PIN_HASH_PREFIX = "sha256$"


def _next_int_id(collection: EntityCollection) -> int:
    return max((int(item.id) for item in collection), default=0) + 1


def _persist(state: AppState, store: RemoteStore | None, writes: BackgroundWrites | None) -> bool:
    return bool(state.connected and store is not None and writes is not None)


# ----------------------------------------------------------------------
# Products
# ----------------------------------------------------------------------


def add_product(
    state: AppState,
    payload: ProductRequest,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
) -> Product:
    product_id = payload.id or str(int(localnow().timestamp() * 1000))
    if state.cache.products.contains(product_id):
        raise ValidationError(f"Product {product_id} already exists")
    product = Product.model_validate({**payload.model_dump(exclude={"id"}), "id": product_id})
    state.cache.products.insert(product)
    state.notify(f"{product.name} added", NoticeType.SUCCESS)
    if _persist(state, store, writes):
        writes.spawn(f"Add product {product.id}", store.add_product(product))
    return product


def update_product(
    state: AppState,
    product_id: str,
    payload: ProductRequest,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
) -> Product:
    if not state.cache.products.contains(product_id):
        raise NotFoundError(f"Product {product_id} not found")
    product = Product.model_validate({**payload.model_dump(exclude={"id"}), "id": product_id})
    state.cache.products.update(product)
    state.notify(f"{product.name} updated", NoticeType.SUCCESS)
    if _persist(state, store, writes):
        writes.spawn(f"Update product {product.id}", store.update_product(product))
    return product


def delete_product(
    state: AppState,
    product_id: str,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
) -> None:
    if not state.cache.products.delete(product_id):
        raise NotFoundError(f"Product {product_id} not found")
    state.notify("Product deleted", NoticeType.INFO)
    if _persist(state, store, writes):
        writes.spawn(f"Delete product {product_id}", store.delete_product(product_id))


def low_stock(products: list[Product], threshold: int = 10) -> list[Product]:
    return sorted((p for p in products if p.stock < threshold), key=lambda p: p.stock)


def _expiry(product: Product) -> date | None:
    if not product.expiry_date:
        return None
    try:
        return datetime.fromisoformat(product.expiry_date[:10]).date()
    except ValueError:
        return None


def expiring_soon(
    products: list[Product], days: int = 7, today: date | None = None
) -> list[Product]:
    """Products whose expiry date falls within ``days`` (already expired included)."""
    today = today or localnow().date()
    cutoff = today + timedelta(days=days)
    dated = [(p, _expiry(p)) for p in products]
    soon = [(p, d) for p, d in dated if d is not None and d <= cutoff]
    soon.sort(key=lambda pair: pair[1])
    return [p for p, _ in soon]


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------


def add_user(
    state: AppState,
    payload: CreateUserRequest,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
) -> User:
    user_id = f"u{uuid.uuid4().hex[:8]}"
    user = User(
        id=user_id,
        name=payload.name.strip(),
        role=Roles(payload.role),
        pin=f"{PIN_HASH_PREFIX}{hash_pin(payload.pin, user_id)}",
    )
    state.cache.users.insert(user)
    logger.info("Added user %s with role %s", user.id, user.role.value)
    state.notify(f"{user.name} added", NoticeType.SUCCESS)
    if _persist(state, store, writes):
        writes.spawn(f"Add user {user.id}", store.add_user(user))
    return user


def delete_user(
    state: AppState,
    user_id: str,
    store: RemoteStore | None = None,
    writes: BackgroundWrites | None = None,
) -> None:
    if state.current_user and state.current_user.id == user_id:
        raise ValidationError("Cannot delete the signed-in user")
    if not state.cache.users.delete(user_id):
        raise NotFoundError(f"User {user_id} not found")
    logger.info("Deleted user %s", user_id)
    state.notify("User removed", NoticeType.INFO)
    if _persist(state, store, writes):
        writes.spawn(f"Delete user {user_id}", store.delete_user(user_id))


# ----------------------------------------------------------------------
# Remote-first configuration
# ----------------------------------------------------------------------


async def add_kitchen_screen(
    state: AppState, payload: CreateKitchenScreenRequest, store: RemoteStore | None = None
) -> KitchenScreen | None:
    row = {"name": payload.name.strip(), "ip": payload.ip.strip()}
    if state.connected and store is not None:
        screen = await store.add_kitchen_screen(row)
        if screen is None:
            logger.warning("Remote insert of kitchen screen %s failed", row["name"])
            state.notify("Failed to add kitchen screen", NoticeType.ERROR)
            return None
        state.notify(f"{screen.name} added", NoticeType.SUCCESS)
        return screen

    screen = KitchenScreen(id=_next_int_id(state.cache.kitchen_screens), **row)
    state.cache.kitchen_screens.insert(screen)
    state.notify(f"{screen.name} added", NoticeType.SUCCESS)
    return screen


async def remove_kitchen_screen(
    state: AppState, screen_id: int, store: RemoteStore | None = None
) -> bool:
    if not state.cache.kitchen_screens.contains(screen_id):
        raise NotFoundError(f"Kitchen screen {screen_id} not found")
    if state.connected and store is not None:
        removed = await store.delete_kitchen_screen(screen_id)
    else:
        removed = state.cache.kitchen_screens.delete(screen_id)
    if not removed:
        state.notify("Failed to remove kitchen screen", NoticeType.ERROR)
    return removed


async def add_order_status(
    state: AppState, payload: CreateOrderStatusRequest, store: RemoteStore | None = None
) -> OrderStatus | None:
    label = payload.label.strip()
    if any(s.label.lower() == label.lower() for s in state.cache.order_statuses):
        raise ValidationError(f"Status '{label}' already exists")
    row = {
        "label": label,
        "color": payload.color,
        "isKitchen": payload.is_kitchen,
        "isFinal": payload.is_final,
    }
    if state.connected and store is not None:
        status = await store.add_order_status(row)
        if status is None:
            logger.warning("Remote insert of status %s failed", label)
            state.notify("Failed to add status", NoticeType.ERROR)
        return status

    status = OrderStatus.model_validate({**row, "id": _next_int_id(state.cache.order_statuses)})
    state.cache.order_statuses.insert(status)
    return status


async def remove_order_status(
    state: AppState, status_id: int, store: RemoteStore | None = None
) -> bool:
    status = state.cache.order_statuses.get(status_id)
    if status is None:
        raise NotFoundError(f"Status {status_id} not found")
    if is_protected_label(status.label):
        raise ValidationError(f"The '{status.label}' status cannot be removed")
    if state.connected and store is not None:
        removed = await store.delete_order_status(status_id)
    else:
        removed = state.cache.order_statuses.delete(status_id)
    if not removed:
        state.notify("Failed to remove status", NoticeType.ERROR)
    return removed


async def add_category(
    state: AppState, name: str, store: RemoteStore | None = None
) -> CategoryItem | None:
    name = name.strip()
    if not name:
        raise ValidationError("Category name is required")
    if any(c.name.lower() == name.lower() for c in state.cache.categories):
        raise ValidationError(f"Category '{name}' already exists")
    if state.connected and store is not None:
        category = await store.add_category(name)
        if category is None:
            logger.warning("Remote insert of category %s failed", name)
            state.notify("Failed to add category", NoticeType.ERROR)
        return category

    category = CategoryItem(id=_next_int_id(state.cache.categories), name=name)
    state.cache.categories.insert(category)
    return category


async def delete_category(
    state: AppState, category_id: int, store: RemoteStore | None = None
) -> bool:
    if not state.cache.categories.contains(category_id):
        raise NotFoundError(f"Category {category_id} not found")
    if state.connected and store is not None:
        removed = await store.delete_category(category_id)
    else:
        removed = state.cache.categories.delete(category_id)
    if not removed:
        state.notify("Failed to delete category", NoticeType.ERROR)
    return removed
