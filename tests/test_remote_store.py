from __future__ import annotations

import asyncio

from conftest import api_error

from cosmo_pos.constants import Table


def run(coro):
    return asyncio.run(coro)


def test_list_returns_rows_and_none_on_failure(store, fake_client):
    assert len(run(store.list(Table.PRODUCTS))) == 8

    fake_client.fail("products", "select", api_error("500", "boom"))
    assert run(store.list(Table.PRODUCTS)) is None


def test_empty_table_is_an_empty_list_not_none(store):
    assert run(store.list(Table.ORDERS)) == []


def test_offline_store_degrades_every_call(offline_store):
    assert run(offline_store.list(Table.PRODUCTS)) is None
    assert run(offline_store.get_orders()) is None
    assert run(offline_store.insert(Table.CATEGORIES, {"name": "x"})) is None
    assert run(offline_store.delete(Table.CATEGORIES, 1)) is False


def test_missing_reference_tables_return_defaults(store, fake_client):
    del fake_client.tables["order_statuses"]
    fake_client.fail(
        "categories",
        "select",
        api_error("PGRST205", "Could not find the table 'public.categories' in the schema cache"),
    )

    statuses = run(store.get_order_statuses())
    categories = run(store.get_categories())

    assert [s.label for s in statuses] == ["Pending", "Preparing", "Ready", "Completed", "Cancelled"]
    assert {c.name for c in categories} == {"Dumplings", "Sides", "Drinks", "Dessert"}


def test_missing_table_for_other_collections_is_none(store, fake_client):
    del fake_client.tables["kitchen_screens"]
    assert run(store.get_kitchen_screens()) is None


def test_write_retries_once_without_unknown_column(store, fake_client):
    fake_client.fail(
        "orders",
        "insert",
        api_error("PGRST204", "Could not find the 'openDrawer' column of 'orders' in the schema cache"),
    )

    row = run(store.insert(Table.ORDERS, {"id": "ORD-1", "openDrawer": True, "status": "Pending"}))

    inserts = [c for c in fake_client.calls if c["op"] == "insert"]
    assert len(inserts) == 2
    assert "openDrawer" in inserts[0]["payload"]
    assert "openDrawer" not in inserts[1]["payload"]
    assert row["id"] == "ORD-1"


def test_write_does_not_retry_other_errors(store, fake_client):
    fake_client.fail("orders", "insert", api_error("23505", "duplicate key"))

    assert run(store.insert(Table.ORDERS, {"id": "ORD-1"})) is None
    assert len([c for c in fake_client.calls if c["op"] == "insert"]) == 1


def test_list_orders_falls_back_to_local_sort(store, fake_client):
    fake_client.tables["orders"] = [
        {"id": "ORD-1", "date": "2024-05-01 09:00:00"},
        {"id": "ORD-2", "date": "2024-05-01 11:00:00"},
        {"id": "ORD-3", "date": "not a date"},
    ]
    fake_client.fail("orders", "select-ordered", api_error("42703", "column created_at does not exist"))

    rows = run(store.list_orders())

    assert [r["id"] for r in rows] == ["ORD-2", "ORD-1", "ORD-3"]


def test_malformed_rows_are_skipped(store, fake_client):
    fake_client.tables["products"].append({"id": "bad", "name": "No price"})
    products = run(store.get_products())
    assert len(products) == 8


def test_typed_writes(store, fake_client):
    category = run(store.add_category("Bao"))
    assert category.name == "Bao"
    assert run(store.delete_category(category.id)) is True
    assert run(store.update_order_status("ORD-404", "Ready")) is True
