"""
Order status workflow.

Statuses are configurable rows in the ``order_statuses`` collection. Orders
reference a status by its label, so every lookup in the workflow goes
through ``StatusCatalog``, which resolves labels against the configured rows
and supplies fallbacks when the catalog is empty or incomplete.

Transitions are advisory: the default "next" step follows
Pending -> Preparing -> Ready -> Completed, but an explicit target always
wins and no transition is rejected.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from cosmo_pos.constants import (
    DEFAULT_KITCHEN_STATUS_LABELS,
    DEFAULT_STATUS_COLOR,
    ORDER_PROGRESSION,
    PROTECTED_STATUS_LABELS,
    STATUS_COLOR_FALLBACKS,
    STATUS_COMPLETED,
    STATUS_PENDING,
    STATUS_PREPARING,
    STATUS_READY,
)
from cosmo_pos.datetime_utils import localnow, parse_order_date
from cosmo_pos.schemas import Order, OrderStatus

_PROGRESSION = {label.lower(): following for label, following in ORDER_PROGRESSION.items()}
_PROTECTED = frozenset(label.lower() for label in PROTECTED_STATUS_LABELS)
_COLORS = {label.lower(): color for label, color in STATUS_COLOR_FALLBACKS.items()}


def is_protected_label(label: str | None) -> bool:
    """Pending and Completed cannot be removed, whatever their spelling."""
    return bool(label) and label.strip().lower() in _PROTECTED


class StatusCatalog:
    """Label-based view over the configured order statuses."""

    def __init__(self, statuses: Iterable[OrderStatus]):
        self.statuses = list(statuses)

    def resolve(self, label: str | None) -> OrderStatus | None:
        """Find a configured status by label (case-insensitive)."""
        if not label:
            return None
        wanted = label.strip().lower()
        for status in self.statuses:
            if status.label.lower() == wanted:
                return status
        return None

    def has(self, label: str) -> bool:
        return self.resolve(label) is not None

    def canonical(self, label: str) -> str:
        """Configured spelling of a label, or the label itself if unknown."""
        status = self.resolve(label)
        return status.label if status else label

    @property
    def ready_label(self) -> str:
        return self.canonical(STATUS_READY)

    @property
    def start_status(self) -> str:
        """Status assigned to newly created orders."""
        if self.has(STATUS_PENDING):
            return self.canonical(STATUS_PENDING)
        return STATUS_PREPARING

    def next_status(self, current: str | None) -> str:
        """Default forward step for the kitchen "next" action."""
        status = self.canonical(current) if current else ""
        if status.lower() == STATUS_PREPARING.lower():
            return self.ready_label
        following = _PROGRESSION.get(status.lower())
        if following is None:
            return self.canonical(STATUS_COMPLETED)
        return self.canonical(following)

    def kitchen_labels(self) -> set[str]:
        """Labels shown on the kitchen display."""
        if not self.statuses:
            labels = set(DEFAULT_KITCHEN_STATUS_LABELS)
        else:
            labels = {status.label for status in self.statuses if status.is_kitchen}
        labels.add(self.ready_label)
        return labels

    def is_kitchen_active(self, label: str | None) -> bool:
        if not label:
            return False
        wanted = label.lower()
        return any(kitchen.lower() == wanted for kitchen in self.kitchen_labels())

    def is_final(self, label: str | None) -> bool:
        status = self.resolve(label)
        return bool(status and status.is_final)

    def color_for(self, label: str | None) -> str:
        status = self.resolve(label)
        if status and status.color:
            return status.color
        return _COLORS.get((label or "").strip().lower(), DEFAULT_STATUS_COLOR)

    def is_protected(self, status: OrderStatus) -> bool:
        return is_protected_label(status.label)


def resolve_target_status(catalog: StatusCatalog, current: str, requested: str | None) -> str:
    """An explicit target overrides the default progression."""
    if requested and requested.strip():
        return catalog.canonical(requested.strip())
    return catalog.next_status(current)


@dataclass(frozen=True)
class KitchenTicket:
    order: Order
    next_status: str
    waiting_minutes: int
    long_wait: bool
    color: str

    def to_dict(self) -> dict:
        return {
            "order": self.order.model_dump(by_alias=True, mode="json"),
            "nextStatus": self.next_status,
            "waitingMinutes": self.waiting_minutes,
            "longWait": self.long_wait,
            "color": self.color,
        }


def kitchen_queue(
    orders: Iterable[Order],
    catalog: StatusCatalog,
    long_wait_minutes: int = 15,
    now: datetime | None = None,
) -> list[KitchenTicket]:
    """
    Kitchen-active orders, oldest first, flagged when waiting too long.
    """
    now = now or localnow()
    threshold = timedelta(minutes=long_wait_minutes)
    active = [order for order in orders if catalog.is_kitchen_active(order.status)]
    active.sort(key=lambda order: parse_order_date(order.date))

    tickets = []
    for order in active:
        placed = parse_order_date(order.date)
        if placed == datetime.min:
            waited = timedelta(0)
        else:
            waited = max(now - placed, timedelta(0))
        tickets.append(
            KitchenTicket(
                order=order,
                next_status=catalog.next_status(order.status),
                waiting_minutes=int(waited.total_seconds() // 60),
                long_wait=waited > threshold,
                color=catalog.color_for(order.status),
            )
        )
    return tickets


def active_kitchen_count(orders: Iterable[Order], catalog: StatusCatalog) -> int:
    return sum(1 for order in orders if catalog.is_kitchen_active(order.status))
