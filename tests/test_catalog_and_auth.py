from __future__ import annotations

import asyncio
from datetime import date

import pytest

from cosmo_pos.schemas import (
    CreateKitchenScreenRequest,
    CreateOrderStatusRequest,
    CreateUserRequest,
    OrderStatus,
    Product,
    ProductRequest,
)
from cosmo_pos.services import auth_service, catalog_service
from cosmo_pos.validation import NotFoundError, ValidationError


def test_product_crud_is_local_first(state):
    product = catalog_service.add_product(
        state, ProductRequest(id="99", name="Bao", price=30, stock=5)
    )
    assert state.cache.products.get("99").name == "Bao"

    catalog_service.update_product(
        state, product.id, ProductRequest(name="Pork Bao", price=32, stock=5)
    )
    assert state.cache.products.get("99").name == "Pork Bao"

    catalog_service.delete_product(state, "99")
    assert not state.cache.products.contains("99")
    with pytest.raises(NotFoundError):
        catalog_service.delete_product(state, "99")


def test_low_stock_and_expiring_soon():
    products = [
        Product(id="1", name="a", price=1, stock=12, expiry_date="2024-05-20"),
        Product(id="2", name="b", price=1, stock=4, expiry_date="2024-05-05"),
        Product(id="3", name="c", price=1, stock=9, expiry_date="2024-04-30"),
        Product(id="4", name="d", price=1, stock=0),
    ]

    assert [p.id for p in catalog_service.low_stock(products, 10)] == ["4", "2", "3"]
    soon = catalog_service.expiring_soon(products, 7, today=date(2024, 5, 1))
    assert [p.id for p in soon] == ["3", "2"]


def test_add_user_hashes_pin_and_can_sign_in(state):
    user = catalog_service.add_user(state, CreateUserRequest(name="Chef Lee", pin="4321"))

    assert user.pin.startswith("sha256$")
    assert "4321" not in user.pin
    assert auth_service.login(state, "4321").id == user.id
    assert state.current_user.id == user.id


def test_create_user_request_requires_four_digit_pin():
    with pytest.raises(Exception):
        CreateUserRequest(name="x", pin="12")


def test_login_with_legacy_pin_and_logout(state):
    user = auth_service.login(state, "1234")
    assert user.name == "Manager Mike"
    assert state.notices[-1].message == "Welcome back, Manager Mike"

    auth_service.logout(state)
    assert state.current_user is None

    with pytest.raises(ValidationError):
        auth_service.login(state, "9999")


def test_cannot_delete_signed_in_user(state):
    auth_service.login(state, "0000")
    with pytest.raises(ValidationError):
        catalog_service.delete_user(state, "u2")
    catalog_service.delete_user(state, "u1")
    assert not state.cache.users.contains("u1")


def test_protected_statuses_cannot_be_removed(state):
    pending = next(s for s in state.cache.order_statuses if s.label == "Pending")
    ready = next(s for s in state.cache.order_statuses if s.label == "Ready")

    with pytest.raises(ValidationError):
        asyncio.run(catalog_service.remove_order_status(state, pending.id))
    assert asyncio.run(catalog_service.remove_order_status(state, ready.id)) is True
    assert not state.cache.order_statuses.contains(ready.id)


def test_offline_configuration_edits_are_local(state):
    screen = asyncio.run(
        catalog_service.add_kitchen_screen(state, CreateKitchenScreenRequest(name="Grill", ip="10.0.0.9"))
    )
    status = asyncio.run(
        catalog_service.add_order_status(state, CreateOrderStatusRequest(label="On Hold"))
    )
    category = asyncio.run(catalog_service.add_category(state, "Bao"))

    assert state.cache.kitchen_screens.get(screen.id).name == "Grill"
    assert status.id == 6
    assert state.cache.categories.contains(category.id)

    with pytest.raises(ValidationError):
        asyncio.run(catalog_service.add_category(state, "bao"))
    with pytest.raises(ValidationError):
        asyncio.run(catalog_service.add_order_status(state, CreateOrderStatusRequest(label="pending")))


def test_connected_configuration_edits_wait_for_realtime(state, store, fake_client):
    state.connected = True

    category = asyncio.run(catalog_service.add_category(state, "Bao", store))

    assert category.name == "Bao"
    assert any(r["name"] == "Bao" for r in fake_client.tables["categories"])
    assert not state.cache.categories.contains(category.id)


def test_lowercase_protected_status_cannot_be_removed(state):
    state.cache.order_statuses.replace_all([OrderStatus(id=1, label="pending")])

    with pytest.raises(ValidationError):
        asyncio.run(catalog_service.remove_order_status(state, 1))
    assert state.cache.order_statuses.contains(1)
