"""
Terminal controller.

Owns the application state together with the event loop that mutates it.
Every public method is safe to call from any thread: the work is submitted
to the loop and the caller blocks on the result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from cosmo_pos.config import AppConfig
from cosmo_pos.constants import LOCAL_SETTING_PRINTER, LOCAL_SETTING_STORE, NoticeType
from cosmo_pos.runtime import BackgroundWrites, LoopRunner
from cosmo_pos.schemas import (
    CartItem,
    CategoryItem,
    CheckoutRequest,
    CreateKitchenScreenRequest,
    CreateOrderStatusRequest,
    CreateUserRequest,
    KitchenScreen,
    Order,
    OrderStatus,
    PrinterSettings,
    Product,
    ProductRequest,
    StoreSettings,
    User,
)
from cosmo_pos.services import (
    auth_service,
    cart_service,
    catalog_service,
    order_service,
    sync_service,
)
from cosmo_pos.services.notifications_service import NotificationsService
from cosmo_pos.services.order_state_machine import (
    KitchenTicket,
    StatusCatalog,
    active_kitchen_count,
    kitchen_queue,
)
from cosmo_pos.services.price_service import CartTotals, calculate_cart_totals
from cosmo_pos.services.reconciliation_service import ReconciliationWorker
from cosmo_pos.services.settings_service import SettingsService
from cosmo_pos.state import AppState
from cosmo_pos.supabase.client import RemoteStore
from cosmo_pos.supabase.realtime import RealtimeManager
from cosmo_pos.validation import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PosController:
    def __init__(
        self,
        config: AppConfig,
        store: RemoteStore | None = None,
        use_local_settings: bool = True,
    ):
        self.config = config
        self.state = AppState()
        self.runner = LoopRunner()
        self.store = store
        self.use_local_settings = use_local_settings
        self.writes = BackgroundWrites(self.state)
        self.realtime: RealtimeManager | None = None
        self.worker: ReconciliationWorker | None = None
        self.notifications: NotificationsService | None = None
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> PosController:
        if self._started:
            return self
        if self.use_local_settings:
            self._load_local_settings()
        self.runner.start()
        self.runner.run(self._startup())
        self._started = True
        return self

    def _load_local_settings(self) -> None:
        self.state.printer_settings = SettingsService.load_printer_settings()
        self.state.store_settings = SettingsService.load_store_settings(
            {"name": self.config.restaurant_name, "taxRate": self.config.tax_rate}
        )

    async def _startup(self) -> None:
        if self.store is None:
            self.store = await RemoteStore.connect(self.config)
        self.notifications = NotificationsService(self.store, self.config)

        await sync_service.load_data(self.state, self.store)

        if self.config.realtime_enabled and self.store.available:
            self.realtime = RealtimeManager(self.store, asyncio.Queue())
            self.worker = ReconciliationWorker(self.state.cache, self.realtime.queue)
            self.worker.start()
            channels = await self.realtime.start()
            logger.info(f"Realtime ready with {channels} channels")

        logger.info(
            "POS controller started",
            extra={"connected": self.state.connected, "remote": self.store.available},
        )

    def stop(self) -> None:
        """Release realtime channels, wait for pending writes and stop the loop."""
        if not self._started:
            return
        try:
            self.runner.run(self._shutdown())
        finally:
            self.runner.stop()
            self._started = False

    async def _shutdown(self) -> None:
        if self.realtime is not None:
            await self.realtime.stop()
        await self.writes.drain()
        if self.worker is not None:
            await self.worker.drain()
            await self.worker.stop()
        logger.info("POS controller stopped")

    # ------------------------------------------------------------------
    # Loop helpers
    # ------------------------------------------------------------------

    def run(self, coro) -> Any:
        return self.runner.run(coro)

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Run a synchronous state operation on the loop thread."""

        async def invoke():
            return func(*args, **kwargs)

        return self.runner.run(invoke())

    @property
    def catalog(self) -> StatusCatalog:
        """Status catalog over the cached statuses. Use on the loop thread."""
        return StatusCatalog(self.state.cache.order_statuses.all())

    def status_catalog(self) -> StatusCatalog:
        return self.call(lambda: self.catalog)

    @property
    def currency_symbol(self) -> str:
        return self.config.currency_symbol

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        return self.run(sync_service.refresh(self.state, self.store))

    def status_snapshot(self) -> dict[str, Any]:
        def snapshot():
            return {
                "connected": self.state.connected,
                "loading": self.state.loading,
                "remote": bool(self.store and self.store.available),
                "realtimeChannels": self.realtime.active_channels if self.realtime else [],
                "pendingWrites": self.writes.pending,
                "activeKitchenOrders": active_kitchen_count(
                    self.state.cache.orders, self.catalog
                ),
            }

        return self.call(snapshot)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_products(self) -> list[Product]:
        return self.call(self.state.cache.products.all)

    def get_product(self, product_id: str) -> Product:
        product = self.call(self.state.cache.products.get, product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def low_stock(self) -> list[Product]:
        return self.call(
            lambda: catalog_service.low_stock(
                self.state.cache.products.all(), self.config.low_stock_threshold
            )
        )

    def expiring_soon(self) -> list[Product]:
        return self.call(
            lambda: catalog_service.expiring_soon(
                self.state.cache.products.all(), self.config.expiry_warning_days
            )
        )

    def list_categories(self) -> list[CategoryItem]:
        return self.call(self.state.cache.categories.all)

    def list_users(self) -> list[User]:
        return self.call(self.state.cache.users.all)

    def list_customers(self):
        return self.call(self.state.cache.customers.all)

    def list_kitchen_screens(self) -> list[KitchenScreen]:
        return self.call(self.state.cache.kitchen_screens.all)

    def list_order_statuses(self) -> list[OrderStatus]:
        return self.call(self.state.cache.order_statuses.all)

    def status_color(self, label: str) -> str:
        return self.call(lambda: self.catalog.color_for(label))

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def cart(self) -> tuple[list[CartItem], CartTotals]:
        def read():
            items = list(self.state.cart)
            return items, calculate_cart_totals(items, self.state.store_settings.tax_rate)

        return self.call(read)

    def add_to_cart(
        self, product_id: str, quantity: int = 1, notes: str = "", options: list[str] | None = None
    ) -> CartItem:
        def add():
            product = self.state.cache.products.get(product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")
            option = cart_service.build_option_string(product, options or [])
            return cart_service.add_item(self.state.cart, product, quantity, notes, option)

        return self.call(add)

    def update_cart_quantity(self, index: int, delta: int) -> CartItem:
        return self.call(cart_service.update_quantity, self.state.cart, index, delta)

    def update_cart_note(self, index: int, note: str) -> CartItem:
        return self.call(cart_service.update_note, self.state.cart, index, note)

    def remove_from_cart(self, index: int) -> CartItem:
        return self.call(cart_service.remove_item, self.state.cart, index)

    def clear_cart(self) -> None:
        return self.call(cart_service.clear, self.state.cart)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def checkout(self, request: CheckoutRequest) -> Order:
        return self.call(
            lambda: order_service.checkout(
                self.state,
                self.catalog,
                request.payment_method,
                request.order_type,
                table_number=request.table_number,
                tendered=request.tendered,
                store=self.store,
                writes=self.writes,
            )
        )

    def update_order_status(self, order_id: str, status: str | None = None) -> Order:
        return self.call(
            lambda: order_service.update_order_status(
                self.state,
                self.catalog,
                order_id,
                status,
                store=self.store,
                writes=self.writes,
            )
        )

    def get_order(self, order_id: str) -> Order:
        return self.call(order_service.get_order, self.state, order_id)

    def order_history(
        self,
        status: str | None = None,
        search: str | None = None,
        sort_by: str = "date",
        descending: bool = True,
    ) -> list[Order]:
        return self.call(
            lambda: order_service.order_history(
                self.state.cache.orders.all(), status, search, sort_by, descending
            )
        )

    def kitchen_queue(self) -> list[KitchenTicket]:
        return self.call(
            lambda: kitchen_queue(
                self.state.cache.orders.all(),
                self.catalog,
                self.config.kitchen_long_wait_minutes,
            )
        )

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def add_product(self, payload: ProductRequest) -> Product:
        return self.call(
            catalog_service.add_product, self.state, payload, self.store, self.writes
        )

    def update_product(self, product_id: str, payload: ProductRequest) -> Product:
        return self.call(
            catalog_service.update_product,
            self.state,
            product_id,
            payload,
            self.store,
            self.writes,
        )

    def delete_product(self, product_id: str) -> None:
        return self.call(
            catalog_service.delete_product, self.state, product_id, self.store, self.writes
        )

    def add_user(self, payload: CreateUserRequest) -> User:
        return self.call(catalog_service.add_user, self.state, payload, self.store, self.writes)

    def delete_user(self, user_id: str) -> None:
        return self.call(
            catalog_service.delete_user, self.state, user_id, self.store, self.writes
        )

    def add_kitchen_screen(self, payload: CreateKitchenScreenRequest) -> KitchenScreen | None:
        return self.run(catalog_service.add_kitchen_screen(self.state, payload, self.store))

    def remove_kitchen_screen(self, screen_id: int) -> bool:
        return self.run(catalog_service.remove_kitchen_screen(self.state, screen_id, self.store))

    def add_order_status(self, payload: CreateOrderStatusRequest) -> OrderStatus | None:
        return self.run(catalog_service.add_order_status(self.state, payload, self.store))

    def remove_order_status(self, status_id: int) -> bool:
        return self.run(catalog_service.remove_order_status(self.state, status_id, self.store))

    def add_category(self, name: str) -> CategoryItem | None:
        return self.run(catalog_service.add_category(self.state, name, self.store))

    def delete_category(self, category_id: int) -> bool:
        return self.run(catalog_service.delete_category(self.state, category_id, self.store))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def settings(self) -> tuple[PrinterSettings, StoreSettings]:
        return self.call(lambda: (self.state.printer_settings, self.state.store_settings))

    def update_printer_settings(self, values: dict[str, Any]) -> PrinterSettings:
        current = self.call(lambda: self.state.printer_settings)
        settings = PrinterSettings.model_validate(
            {**current.model_dump(by_alias=True), **values}
        )
        if self.use_local_settings:
            SettingsService.save(LOCAL_SETTING_PRINTER, settings)

        def apply():
            self.state.printer_settings = settings
            self.state.notify("Printer settings saved", NoticeType.SUCCESS)

        self.call(apply)
        return settings

    def update_store_settings(self, values: dict[str, Any]) -> StoreSettings:
        current = self.call(lambda: self.state.store_settings)
        settings = StoreSettings.model_validate({**current.model_dump(by_alias=True), **values})
        if self.use_local_settings:
            SettingsService.save(LOCAL_SETTING_STORE, settings)

        def apply():
            self.state.store_settings = settings
            self.state.notify("Store settings saved", NoticeType.SUCCESS)

        self.call(apply)
        return settings

    # ------------------------------------------------------------------
    # Auth & notices
    # ------------------------------------------------------------------

    def login(self, pin: str) -> User:
        return self.call(auth_service.login, self.state, pin)

    def logout(self) -> None:
        return self.call(auth_service.logout, self.state)

    def current_user(self) -> User | None:
        return self.call(lambda: self.state.current_user)

    def notices(self) -> list[dict]:
        return self.call(lambda: [notice.to_dict() for notice in self.state.notices])

    def dismiss_notice(self, notice_id: str) -> bool:
        return self.call(self.state.dismiss_notice, notice_id)

    def recorded_errors(self) -> list[dict]:
        return self.call(lambda: [entry.to_dict() for entry in self.state.errors])

    # ------------------------------------------------------------------
    # Receipts
    # ------------------------------------------------------------------

    def send_receipt_email(self, order_id: str, email: str) -> bool:
        order = self.get_order(order_id)
        _, store_settings = self.settings()
        return self.run(self.notifications.send_receipt_email(email, order, store_settings))

    def send_receipt_sms(self, order_id: str, phone: str, message: str | None = None) -> bool:
        order = self.get_order(order_id)
        _, store_settings = self.settings()
        return self.run(
            self.notifications.send_receipt_sms(phone, order, message, store_settings)
        )
