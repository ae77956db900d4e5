"""
In-memory application state for a single POS terminal.

Everything here is mutated only from coroutines running on the controller's
event loop, so no locking is needed.
"""

from __future__ import annotations

import uuid
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

from cosmo_pos.constants import MAX_NOTICES, MAX_RECORDED_ERRORS, NoticeType, Table
from cosmo_pos.datetime_utils import utcnow
from cosmo_pos.schemas import (
    CartItem,
    CategoryItem,
    Customer,
    KitchenScreen,
    Order,
    OrderStatus,
    PrinterSettings,
    Product,
    StoreSettings,
    User,
)

T = TypeVar("T", bound=BaseModel)

Placement = Literal["append", "prepend", "sorted"]


def record_key(value) -> str:
    """Ids arrive as int or str depending on the column; compare as text."""
    return str(value)


class EntityCollection(Generic[T]):
    """
    Ordered, id-unique list of cached records for one remote collection.
    """

    def __init__(
        self,
        name: str,
        model: type[T],
        placement: Placement = "append",
        sort_key: Callable[[T], object] | None = None,
    ):
        self.name = name
        self.model = model
        self.placement = placement
        self.sort_key = sort_key
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def all(self) -> list[T]:
        return list(self._items)

    def replace_all(self, items: Iterable[T]) -> None:
        self._items = list(items)
        if self.placement == "sorted" and self.sort_key:
            self._items.sort(key=self.sort_key)

    def _index(self, record_id) -> int:
        key = record_key(record_id)
        for i, item in enumerate(self._items):
            if record_key(item.id) == key:
                return i
        return -1

    def get(self, record_id) -> T | None:
        index = self._index(record_id)
        return self._items[index] if index >= 0 else None

    def contains(self, record_id) -> bool:
        return self._index(record_id) >= 0

    def insert(self, item: T) -> bool:
        """Add the record unless one with the same id is already cached."""
        if self.contains(item.id):
            return False
        if self.placement == "prepend":
            self._items.insert(0, item)
        else:
            self._items.append(item)
            if self.placement == "sorted" and self.sort_key:
                self._items.sort(key=self.sort_key)
        return True

    def update(self, item: T) -> bool:
        """Replace the record with the same id; unknown ids are ignored."""
        index = self._index(item.id)
        if index < 0:
            return False
        self._items[index] = item
        if self.placement == "sorted" and self.sort_key:
            self._items.sort(key=self.sort_key)
        return True

    def delete(self, record_id) -> bool:
        index = self._index(record_id)
        if index < 0:
            return False
        del self._items[index]
        return True


class LocalStateCache:
    """Mirrors of the seven remote collections."""

    def __init__(self):
        self.products: EntityCollection[Product] = EntityCollection(Table.PRODUCTS.value, Product)
        self.orders: EntityCollection[Order] = EntityCollection(
            Table.ORDERS.value, Order, placement="prepend"
        )
        self.users: EntityCollection[User] = EntityCollection(Table.USERS.value, User)
        self.customers: EntityCollection[Customer] = EntityCollection(
            Table.CUSTOMERS.value, Customer
        )
        self.categories: EntityCollection[CategoryItem] = EntityCollection(
            Table.CATEGORIES.value,
            CategoryItem,
            placement="sorted",
            sort_key=lambda c: c.name.lower(),
        )
        self.kitchen_screens: EntityCollection[KitchenScreen] = EntityCollection(
            Table.KITCHEN_SCREENS.value, KitchenScreen
        )
        self.order_statuses: EntityCollection[OrderStatus] = EntityCollection(
            Table.ORDER_STATUSES.value, OrderStatus
        )

    def collection_for(self, table: Table | str) -> EntityCollection | None:
        mapping = {
            Table.PRODUCTS.value: self.products,
            Table.ORDERS.value: self.orders,
            Table.USERS.value: self.users,
            Table.CUSTOMERS.value: self.customers,
            Table.CATEGORIES.value: self.categories,
            Table.KITCHEN_SCREENS.value: self.kitchen_screens,
            Table.ORDER_STATUSES.value: self.order_statuses,
        }
        key = table.value if isinstance(table, Table) else table
        return mapping.get(key)


@dataclass
class Notice:
    message: str
    type: NoticeType = NoticeType.INFO
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict:
        return {"id": self.id, "message": self.message, "type": self.type.value}


@dataclass
class RecordedError:
    """Entry on the observable error channel for failed remote writes."""

    context: str
    message: str
    at: str = field(default_factory=lambda: utcnow().isoformat())

    def to_dict(self) -> dict:
        return {"context": self.context, "message": self.message, "at": self.at}


@dataclass
class AppState:
    """
    Terminal state owned by the controller: cache, cart, session and UI flags.
    """

    cache: LocalStateCache = field(default_factory=LocalStateCache)
    cart: list[CartItem] = field(default_factory=list)
    connected: bool = False
    loading: bool = True
    active_tab: str = "pos"
    current_user: User | None = None
    printer_settings: PrinterSettings = field(default_factory=PrinterSettings)
    store_settings: StoreSettings = field(default_factory=StoreSettings)
    notices: deque[Notice] = field(default_factory=lambda: deque(maxlen=MAX_NOTICES))
    errors: deque[RecordedError] = field(default_factory=lambda: deque(maxlen=MAX_RECORDED_ERRORS))

    def notify(self, message: str, notice_type: NoticeType = NoticeType.INFO) -> Notice:
        notice = Notice(message=message, type=notice_type)
        self.notices.append(notice)
        return notice

    def dismiss_notice(self, notice_id: str) -> bool:
        for notice in self.notices:
            if notice.id == notice_id:
                self.notices.remove(notice)
                return True
        return False

    def record_error(self, context: str, message: str) -> RecordedError:
        entry = RecordedError(context=context, message=message)
        self.errors.append(entry)
        return entry
