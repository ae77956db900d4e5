from __future__ import annotations

import asyncio

from conftest import api_error

from cosmo_pos.services import seed, sync_service
from cosmo_pos.state import AppState


def test_connected_load_adopts_remote_data(store, fake_client):
    fake_client.tables["products"] = fake_client.tables["products"][:2]
    fake_client.tables["kitchen_screens"] = [{"id": 1, "name": "Grill", "ip": "10.0.0.5"}]
    state = AppState()

    connected = asyncio.run(sync_service.load_data(state, store))

    assert connected is True
    assert state.connected is True
    assert state.loading is False
    assert len(state.cache.products) == 2
    # Connected with no remote orders: no seed orders are shown.
    assert len(state.cache.orders) == 0
    assert [s.name for s in state.cache.kitchen_screens] == ["Grill"]


def test_empty_products_means_not_connected(store, fake_client):
    fake_client.tables["products"] = []
    state = AppState()

    connected = asyncio.run(sync_service.load_data(state, store))

    assert connected is False
    assert len(state.cache.products) == len(seed.SEED_PRODUCTS)
    assert [o.id for o in state.cache.orders] == ["ORD-001", "ORD-002", "ORD-003"]


def test_empty_remote_statuses_are_authoritative(store, fake_client):
    fake_client.tables["order_statuses"] = []
    state = AppState()

    asyncio.run(sync_service.load_data(state, store))

    assert len(state.cache.order_statuses) == 0


def test_failed_status_read_falls_back_to_seed(store, fake_client):
    fake_client.fail("order_statuses", "select", api_error("500", "timeout"))
    state = AppState()

    asyncio.run(sync_service.load_data(state, store))

    assert [s.label for s in state.cache.order_statuses][0] == "Pending"


def test_no_client_uses_full_fallback(offline_store):
    state = AppState()

    connected = asyncio.run(sync_service.load_data(state, offline_store))

    assert connected is False
    assert len(state.cache.products) == 8
    assert len(state.cache.users) == 2
    assert len(state.cache.order_statuses) == 5
    for name in (
        "products",
        "users",
        "customers",
        "orders",
        "categories",
        "kitchen_screens",
        "order_statuses",
    ):
        assert len(getattr(state.cache, name)) > 0, name


def test_exception_during_gather_triggers_full_fallback(store, monkeypatch):
    async def explode():
        raise RuntimeError("network down")

    monkeypatch.setattr(store, "get_customers", explode)
    state = AppState()
    state.connected = True

    connected = asyncio.run(sync_service.load_data(state, store))

    assert connected is False
    assert state.connected is False
    assert len(state.cache.orders) == 3


def test_refresh_emits_notice_and_keeps_loading_flag(store):
    state = AppState()
    state.loading = False

    asyncio.run(sync_service.refresh(state, store))

    assert state.loading is False
    assert state.notices[-1].message == "Data refreshed"


def test_unreachable_orders_keep_cached_history(store, fake_client):
    state = AppState()
    state.cache.orders.replace_all(seed.seed_orders())
    fake_client.fail("orders", "select", api_error("500", "timeout"), times=2)

    connected = asyncio.run(sync_service.refresh(state, store))

    assert connected is True
    assert [o.id for o in state.cache.orders] == ["ORD-001", "ORD-002", "ORD-003"]


def test_empty_remote_orders_clear_cached_history(store):
    state = AppState()
    state.cache.orders.replace_all(seed.seed_orders())

    asyncio.run(sync_service.refresh(state, store))

    assert len(state.cache.orders) == 0
