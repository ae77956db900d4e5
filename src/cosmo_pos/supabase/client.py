"""
Supabase table access for the POS terminal.

Every read returns ``None`` when the store is unreachable or the query
failed; callers must not read ``None`` as "no records". Writes return the
persisted row (or ``True`` for deletes) and degrade to ``None`` / ``False``.
Nothing here raises to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from postgrest.exceptions import APIError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from supabase import AsyncClient, acreate_client

from cosmo_pos.config import AppConfig
from cosmo_pos.constants import (
    PG_UNDEFINED_COLUMN,
    PG_UNDEFINED_TABLE,
    PGRST_SCHEMA_CACHE,
    PGRST_UNKNOWN_COLUMN,
    Table,
)
from cosmo_pos.datetime_utils import parse_order_date
from cosmo_pos.schemas import (
    CategoryItem,
    Customer,
    KitchenScreen,
    Order,
    OrderStatus,
    Product,
    User,
)
from cosmo_pos.services.seed import default_category_rows, default_status_rows

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _error_code(error: Exception) -> str:
    return str(getattr(error, "code", "") or "")


def _error_message(error: Exception) -> str:
    return str(getattr(error, "message", None) or error)


def is_missing_table(error: Exception) -> bool:
    code = _error_code(error)
    if code in {PG_UNDEFINED_TABLE, PGRST_SCHEMA_CACHE}:
        return True
    message = _error_message(error).lower()
    return "schema cache" in message and "column" not in message


def missing_column(error: Exception, row: dict[str, Any]) -> str | None:
    """Return the payload field an undefined-column error refers to, if any."""
    if _error_code(error) not in {PG_UNDEFINED_COLUMN, PGRST_UNKNOWN_COLUMN}:
        return None
    message = _error_message(error)
    for key in row:
        if f'"{key}"' in message or f"'{key}'" in message:
            return key
    return None


def handle_db_error(context: str, error: Exception) -> None:
    if is_missing_table(error):
        logger.warning(
            f"DB error ({context}): table not found. Provision the schema from Admin > Settings."
        )
    else:
        logger.error(f"DB error ({context}): {_error_message(error)}")
    return None


def parse_rows(model: type[M], rows: list[dict[str, Any]], context: str) -> list[M]:
    """Validate rows into models, skipping malformed ones."""
    records: list[M] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except PydanticValidationError as exc:
            logger.warning(
                f"Skipping malformed {context} row",
                extra={"row_id": row.get("id"), "errors": exc.error_count()},
            )
    return records


class RemoteStore:
    """Thin async wrapper over the hosted tables."""

    # Reference collections that fall back to built-in defaults when missing.
    DEFAULT_ROWS = {
        Table.ORDER_STATUSES.value: default_status_rows,
        Table.CATEGORIES.value: default_category_rows,
    }

    def __init__(self, client: AsyncClient | None = None):
        self.client = client

    @classmethod
    async def connect(cls, config: AppConfig) -> RemoteStore:
        """
        Build a store from config. Missing credentials or a failing client
        produce a store with no client, which degrades every call.
        """
        if not config.has_remote:
            logger.warning("Supabase credentials missing; running on seed data.")
            return cls(None)
        try:
            client = await acreate_client(config.supabase_url, config.supabase_anon_key)
        except Exception as exc:
            logger.error("Failed to initialize Supabase client: %s", exc)
            return cls(None)
        return cls(client)

    @property
    def available(self) -> bool:
        return self.client is not None

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    async def list(
        self, table: Table | str, order_by: str | None = None, desc: bool = False
    ) -> list[dict[str, Any]] | None:
        if self.client is None:
            return None
        name = _table_name(table)
        query = self.client.table(name).select("*")
        if order_by:
            query = query.order(order_by, desc=desc)
        try:
            response = await query.execute()
        except APIError as error:
            if is_missing_table(error) and name in self.DEFAULT_ROWS:
                logger.warning(f"{name} table missing. Returning defaults.")
                return self.DEFAULT_ROWS[name]()
            return handle_db_error(name, error)
        except Exception as exc:
            logger.error(f"DB error ({name}): {exc}")
            return None
        return list(response.data or [])

    async def insert(self, table: Table | str, row: dict[str, Any]) -> dict[str, Any] | None:
        if self.client is None:
            return None
        name = _table_name(table)
        return await self._write(
            f"Add {name}", row, lambda payload: self.client.table(name).insert(payload)
        )

    async def update(
        self, table: Table | str, record_id: Any, values: dict[str, Any]
    ) -> dict[str, Any] | None:
        if self.client is None:
            return None
        name = _table_name(table)
        return await self._write(
            f"Update {name}",
            values,
            lambda payload: self.client.table(name).update(payload).eq("id", record_id),
        )

    async def delete(self, table: Table | str, record_id: Any) -> bool:
        if self.client is None:
            return False
        name = _table_name(table)
        try:
            await self.client.table(name).delete().eq("id", record_id).execute()
        except APIError as error:
            handle_db_error(f"Delete {name}", error)
            return False
        except Exception as exc:
            logger.error(f"DB error (Delete {name}): {exc}")
            return False
        return True

    async def _write(self, context: str, row: dict[str, Any], build) -> dict[str, Any] | None:
        """
        Execute a write, retrying once without a column the table does not have yet.
        """
        payload = dict(row)
        try:
            response = await build(payload).execute()
        except APIError as error:
            column = missing_column(error, payload)
            if column is None:
                return handle_db_error(context, error)
            logger.warning(f"'{column}' column missing in DB ({context}). Retrying without it.")
            payload.pop(column)
            try:
                response = await build(payload).execute()
            except APIError as retry_error:
                return handle_db_error(f"{context} (Retry)", retry_error)
            except Exception as exc:
                logger.error(f"DB error ({context} retry): {exc}")
                return None
        except Exception as exc:
            logger.error(f"DB error ({context}): {exc}")
            return None

        data = response.data
        if isinstance(data, list):
            return data[0] if data else payload
        return data or payload

    async def invoke_function(self, name: str, body: dict[str, Any]) -> Any:
        """Invoke an edge function. Errors propagate to the notification layer."""
        if self.client is None:
            raise RuntimeError("Supabase client not available")
        return await self.client.functions.invoke(name, invoke_options={"body": body})

    # ------------------------------------------------------------------
    # Collection reads
    # ------------------------------------------------------------------

    async def list_orders(self) -> list[dict[str, Any]] | None:
        """Newest first; falls back to an unsorted read sorted locally by date."""
        if self.client is None:
            return None
        try:
            response = (
                await self.client.table(Table.ORDERS.value)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            return list(response.data or [])
        except Exception as exc:
            logger.warning(f"Error fetching orders with sort. Retrying without sort: {exc}")

        rows = await self.list(Table.ORDERS)
        if rows is None:
            return None
        return sorted(rows, key=lambda row: parse_order_date(row.get("date")), reverse=True)

    async def get_products(self) -> list[Product] | None:
        return await self._typed(Product, self.list(Table.PRODUCTS), "products")

    async def get_users(self) -> list[User] | None:
        return await self._typed(User, self.list(Table.USERS), "users")

    async def get_customers(self) -> list[Customer] | None:
        return await self._typed(Customer, self.list(Table.CUSTOMERS), "customers")

    async def get_orders(self) -> list[Order] | None:
        return await self._typed(Order, self.list_orders(), "orders")

    async def get_kitchen_screens(self) -> list[KitchenScreen] | None:
        return await self._typed(KitchenScreen, self.list(Table.KITCHEN_SCREENS), "screens")

    async def get_order_statuses(self) -> list[OrderStatus] | None:
        return await self._typed(
            OrderStatus, self.list(Table.ORDER_STATUSES, order_by="id"), "order statuses"
        )

    async def get_categories(self) -> list[CategoryItem] | None:
        return await self._typed(
            CategoryItem, self.list(Table.CATEGORIES, order_by="name"), "categories"
        )

    async def _typed(self, model: type[M], rows_coro, context: str) -> list[M] | None:
        rows = await rows_coro
        if rows is None:
            return None
        return parse_rows(model, rows, context)

    # ------------------------------------------------------------------
    # Collection writes
    # ------------------------------------------------------------------

    async def add_product(self, product: Product) -> Product | None:
        return _one(Product, await self.insert(Table.PRODUCTS, product.to_row()))

    async def update_product(self, product: Product) -> Product | None:
        return _one(
            Product,
            await self.update(Table.PRODUCTS, product.id, product.to_row(exclude={"id"})),
        )

    async def update_product_stock(self, product_id: str, stock: int) -> bool:
        return await self.update(Table.PRODUCTS, product_id, {"stock": stock}) is not None

    async def delete_product(self, product_id: str) -> bool:
        return await self.delete(Table.PRODUCTS, product_id)

    async def add_user(self, user: User) -> User | None:
        return _one(User, await self.insert(Table.USERS, user.to_row()))

    async def delete_user(self, user_id: str) -> bool:
        return await self.delete(Table.USERS, user_id)

    async def add_kitchen_screen(self, row: dict[str, Any]) -> KitchenScreen | None:
        return _one(KitchenScreen, await self.insert(Table.KITCHEN_SCREENS, row))

    async def delete_kitchen_screen(self, screen_id: int) -> bool:
        return await self.delete(Table.KITCHEN_SCREENS, screen_id)

    async def add_order_status(self, row: dict[str, Any]) -> OrderStatus | None:
        return _one(OrderStatus, await self.insert(Table.ORDER_STATUSES, row))

    async def delete_order_status(self, status_id: int) -> bool:
        return await self.delete(Table.ORDER_STATUSES, status_id)

    async def add_category(self, name: str) -> CategoryItem | None:
        return _one(CategoryItem, await self.insert(Table.CATEGORIES, {"name": name}))

    async def delete_category(self, category_id: int) -> bool:
        return await self.delete(Table.CATEGORIES, category_id)

    async def add_order(self, order: Order) -> Order | None:
        return _one(Order, await self.insert(Table.ORDERS, order.to_row()))

    async def update_order_status(self, order_id: str, status: str) -> bool:
        return await self.update(Table.ORDERS, order_id, {"status": status}) is not None


def _table_name(table: Table | str) -> str:
    return table.value if isinstance(table, Table) else table


def _one(model: type[M], row: dict[str, Any] | None) -> M | None:
    if row is None:
        return None
    try:
        return model.model_validate(row)
    except PydanticValidationError as exc:
        logger.warning(f"Persisted {model.__name__} row did not validate: {exc.error_count()} errors")
        return None
