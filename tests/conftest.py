from __future__ import annotations

import copy
import os
from collections.abc import Iterator
from typing import Any

import pytest
from postgrest.exceptions import APIError

os.environ.setdefault("PIN_HASH_SALT", "test-salt")

from cosmo_pos.config import AppConfig  # noqa: E402
from cosmo_pos.db import dispose_engine  # noqa: E402
from cosmo_pos.schemas import CartItem, Product  # noqa: E402
from cosmo_pos.services import seed  # noqa: E402
from cosmo_pos.state import AppState  # noqa: E402
from cosmo_pos.supabase.client import RemoteStore  # noqa: E402


def api_error(code: str, message: str) -> APIError:
    return APIError({"code": code, "message": message, "details": None, "hint": None})


class _Response:
    def __init__(self, data: Any):
        self.data = data


class FakeQuery:
    """
    Minimal stand-in for the postgrest async request builder.
    """

    def __init__(self, client: FakeSupabase, table: str):
        self.client = client
        self.table = table
        self.op = "select"
        self.payload: dict[str, Any] | None = None
        self.filters: list[tuple[str, Any]] = []
        self.order_by: tuple[str, bool] | None = None

    def select(self, *_columns):
        self.op = "select"
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def insert(self, row: dict[str, Any]):
        self.op = "insert"
        self.payload = dict(row)
        return self

    def update(self, values: dict[str, Any]):
        self.op = "update"
        self.payload = dict(values)
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(col)) == str(val) for col, val in self.filters)

    async def execute(self) -> _Response:
        self.client.calls.append(
            {
                "table": self.table,
                "op": self.op,
                "payload": copy.deepcopy(self.payload),
                "filters": list(self.filters),
                "order": self.order_by,
            }
        )
        error = self.client.next_error(self.table, self.op, self.order_by)
        if error is not None:
            raise error
        if self.table not in self.client.tables:
            raise api_error("42P01", f'relation "public.{self.table}" does not exist')

        rows = self.client.tables[self.table]
        if self.op == "select":
            data = [dict(row) for row in rows if self._matches(row)]
            if self.order_by:
                column, desc = self.order_by
                data.sort(key=lambda row: row.get(column) or "", reverse=desc)
            return _Response(data)
        if self.op == "insert":
            row = dict(self.payload)
            if "id" not in row:
                row["id"] = max((int(r["id"]) for r in rows), default=0) + 1
            rows.append(row)
            return _Response([dict(row)])
        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return _Response(updated)
        removed = [row for row in rows if self._matches(row)]
        self.client.tables[self.table] = [row for row in rows if not self._matches(row)]
        return _Response(removed)


class FakeFunctions:
    def __init__(self):
        self.invocations: list[tuple[str, dict]] = []
        self.error: Exception | None = None

    async def invoke(self, name: str, invoke_options: dict | None = None):
        self.invocations.append((name, (invoke_options or {}).get("body")))
        if self.error is not None:
            raise self.error
        return {"ok": True}


class FakeChannel:
    def __init__(self, topic: str):
        self.topic = topic
        self.callbacks: list[tuple[str, str, Any]] = []
        self.subscribed = False

    def on_postgres_changes(self, event: str, schema: str = "public", table: str = "", callback=None, **_):
        self.callbacks.append((event, table, callback))
        return self

    async def subscribe(self, *_args, **_kwargs):
        self.subscribed = True
        return self

    def emit(self, payload: dict[str, Any]) -> None:
        for _event, _table, callback in self.callbacks:
            callback(payload)


class FakeSupabase:
    """
    In-memory replacement for ``supabase.AsyncClient``.

    ``errors`` maps ``(table, op)`` to a list of exceptions raised on the next
    matching calls; ``("orders", "select-ordered")`` targets sorted reads only.
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = tables if tables is not None else {}
        self.errors: dict[tuple[str, str], list[Exception]] = {}
        self.calls: list[dict[str, Any]] = []
        self.functions = FakeFunctions()
        self.channels: list[FakeChannel] = []
        self.removed_channels: list[FakeChannel] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, op: str, error: Exception, times: int = 1) -> None:
        self.errors.setdefault((table, op), []).extend([error] * times)

    def next_error(self, table: str, op: str, order_by) -> Exception | None:
        keys = [(table, op)]
        if op == "select" and order_by:
            keys.insert(0, (table, "select-ordered"))
        for key in keys:
            queue = self.errors.get(key)
            if queue:
                return queue.pop(0)
        return None

    def channel(self, topic: str) -> FakeChannel:
        channel = FakeChannel(topic)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel: FakeChannel) -> None:
        self.removed_channels.append(channel)
        if channel in self.channels:
            self.channels.remove(channel)


def seeded_tables() -> dict[str, list[dict]]:
    return {
        "products": [p.to_row() for p in seed.seed_products()],
        "users": [u.to_row() for u in seed.seed_users()],
        "customers": [c.to_row() for c in seed.seed_customers()],
        "orders": [],
        "kitchen_screens": [],
        "order_statuses": seed.default_status_rows(),
        "categories": seed.default_category_rows(),
    }


def make_config(**overrides) -> AppConfig:
    values = dict(
        app_name="cosmo-pos-test",
        supabase_url="",
        supabase_anon_key="",
        realtime_enabled=True,
        local_db_url="sqlite:///:memory:",
        secret_key="test",
        log_level="WARNING",
        restaurant_name="Cosmo Dumplings",
        tax_rate=0.15,
        currency_symbol="R",
        debug_mode=False,
        low_stock_threshold=10,
        expiry_warning_days=7,
        kitchen_long_wait_minutes=15,
        notifications_simulate_success=True,
        notifications_simulated_delay=0.0,
    )
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture()
def config() -> AppConfig:
    return make_config()


@pytest.fixture()
def fake_client() -> FakeSupabase:
    return FakeSupabase(seeded_tables())


@pytest.fixture()
def store(fake_client) -> RemoteStore:
    return RemoteStore(fake_client)


@pytest.fixture()
def offline_store() -> RemoteStore:
    return RemoteStore(None)


@pytest.fixture()
def state() -> AppState:
    app_state = AppState()
    app_state.cache.products.replace_all(seed.seed_products())
    app_state.cache.order_statuses.replace_all(seed.seed_order_statuses())
    app_state.cache.users.replace_all(seed.seed_users())
    return app_state


@pytest.fixture()
def dumplings() -> Product:
    return Product(id="A", name="Dumplings", price=85, options=["Steamed", "Chilli Oil (+R5)"])


@pytest.fixture()
def tea() -> Product:
    return Product(id="B", name="Tea", price=25)


@pytest.fixture()
def scenario_cart(dumplings, tea) -> list[CartItem]:
    return [
        CartItem(product=dumplings, quantity=2, selected_option="Chilli Oil (+R5)"),
        CartItem(product=tea, quantity=1),
    ]


@pytest.fixture()
def local_db() -> Iterator[None]:
    from cosmo_pos.db import init_db, init_engine
    from cosmo_pos.models import Base

    dispose_engine()
    init_engine(make_config())
    init_db(Base.metadata)
    yield
    dispose_engine()
