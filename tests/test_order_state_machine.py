from __future__ import annotations

from datetime import datetime

from cosmo_pos.schemas import Order, OrderStatus
from cosmo_pos.services import seed
from cosmo_pos.services.order_state_machine import (
    StatusCatalog,
    active_kitchen_count,
    is_protected_label,
    kitchen_queue,
    resolve_target_status,
)


def _statuses(*labels, kitchen=()):
    return [
        OrderStatus(id=i + 1, label=label, is_kitchen=label in kitchen)
        for i, label in enumerate(labels)
    ]


def _order(order_id, status, date="2024-05-01 12:00:00"):
    return Order(
        id=order_id,
        items=[],
        total=0,
        payment_method="Card",
        type="Takeaway",
        date=date,
        status=status,
    )


def test_default_progression_walks_to_completed():
    catalog = StatusCatalog(_statuses("Pending", "Preparing", "Ready", "Completed"))
    status = "Pending"
    seen = []
    for _ in range(3):
        status = resolve_target_status(catalog, status, None)
        seen.append(status)
    assert seen == ["Preparing", "Ready", "Completed"]


def test_progression_ignores_label_case():
    catalog = StatusCatalog(_statuses("pending", "preparing", "ready", "completed"))
    assert catalog.next_status("pending") == "preparing"
    assert catalog.next_status("PREPARING") == "ready"
    assert catalog.next_status("ready") == "completed"


def test_protected_labels_ignore_case():
    catalog = StatusCatalog(_statuses("pending", "Completed", "ready"))
    assert [catalog.is_protected(s) for s in catalog.statuses] == [True, True, False]
    assert is_protected_label(" COMPLETED ")
    assert not is_protected_label(None)


def test_unknown_status_moves_to_completed():
    catalog = StatusCatalog(seed.seed_order_statuses())
    assert catalog.next_status("On Hold") == "Completed"
    assert catalog.next_status(None) == "Completed"


def test_ready_label_resolved_from_catalog():
    catalog = StatusCatalog(_statuses("Pending", "Preparing", "READY", "Completed"))
    assert catalog.next_status("Preparing") == "READY"
    assert StatusCatalog([]).ready_label == "Ready"


def test_explicit_target_overrides_default():
    catalog = StatusCatalog(seed.seed_order_statuses())
    assert resolve_target_status(catalog, "Pending", "Cancelled") == "Cancelled"
    assert resolve_target_status(catalog, "Completed", "Pending") == "Pending"


def test_start_status_prefers_pending():
    assert StatusCatalog(seed.seed_order_statuses()).start_status == "Pending"
    assert StatusCatalog(_statuses("Preparing", "Ready")).start_status == "Preparing"


def test_kitchen_labels_include_ready_and_default_when_empty():
    catalog = StatusCatalog(seed.seed_order_statuses())
    assert catalog.kitchen_labels() == {"Pending", "Preparing", "Ready"}
    assert StatusCatalog([]).kitchen_labels() == {"Pending", "Preparing", "Ready"}
    assert not catalog.is_kitchen_active("Completed")


def test_color_falls_back_for_unknown_labels():
    catalog = StatusCatalog([OrderStatus(id=1, label="Pending", color="bg-custom")])
    assert catalog.color_for("Pending") == "bg-custom"
    assert catalog.color_for("Cancelled") == "bg-red-100 text-red-700"
    assert catalog.color_for("Mystery") == "bg-gray-100 text-gray-700"


def test_kitchen_queue_sorts_oldest_first_and_flags_long_waits():
    catalog = StatusCatalog(seed.seed_order_statuses())
    orders = [
        _order("ORD-3", "Pending", "2024-05-01 12:10:00"),
        _order("ORD-1", "Preparing", "2024-05-01 11:30:00"),
        _order("ORD-2", "Completed", "2024-05-01 11:00:00"),
        _order("ORD-4", "Ready", "2024-05-01 12:05:00"),
    ]
    tickets = kitchen_queue(orders, catalog, 15, now=datetime(2024, 5, 1, 12, 15, 0))

    assert [t.order.id for t in tickets] == ["ORD-1", "ORD-4", "ORD-3"]
    assert [t.long_wait for t in tickets] == [True, False, False]
    assert tickets[0].next_status == "Ready"
    assert tickets[1].next_status == "Completed"
    assert active_kitchen_count(orders, catalog) == 3
