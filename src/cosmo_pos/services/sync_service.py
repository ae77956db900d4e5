"""
Initial load and fallback for the local cache.

All seven collections are fetched concurrently. Remote data is adopted per
collection when present; otherwise the built-in seed data stands in so the
terminal stays usable while the store is unreachable or unprovisioned.
"""

from __future__ import annotations

import asyncio
import logging

from cosmo_pos.constants import NoticeType
from cosmo_pos.services import seed
from cosmo_pos.state import AppState
from cosmo_pos.supabase.client import RemoteStore

logger = logging.getLogger(__name__)


def apply_fallback(state: AppState) -> None:
    """Reset every collection to seed data and mark the terminal offline."""
    cache = state.cache
    cache.products.replace_all(seed.seed_products())
    cache.users.replace_all(seed.seed_users())
    cache.customers.replace_all(seed.seed_customers())
    cache.orders.replace_all(seed.seed_orders())
    cache.categories.replace_all(seed.seed_categories())
    cache.order_statuses.replace_all(seed.seed_order_statuses())
    cache.kitchen_screens.replace_all(seed.seed_kitchen_screens())
    state.connected = False


async def load_data(state: AppState, store: RemoteStore, show_loading: bool = True) -> bool:
    """
    Populate the cache from the remote store. Returns the connected flag.
    """
    if show_loading:
        state.loading = True
    try:
        if not store.available:
            logger.warning("No remote store configured; using fallback data.")
            apply_fallback(state)
            return False

        try:
            (
                products,
                users,
                customers,
                orders,
                screens,
                statuses,
                categories,
            ) = await asyncio.gather(
                store.get_products(),
                store.get_users(),
                store.get_customers(),
                store.get_orders(),
                store.get_kitchen_screens(),
                store.get_order_statuses(),
                store.get_categories(),
            )
        except Exception as exc:
            logger.error(f"Failed to load data: {exc}")
            apply_fallback(state)
            return False

        cache = state.cache
        connected = bool(products)
        state.connected = connected

        cache.products.replace_all(products if products else seed.seed_products())
        cache.users.replace_all(users if users else seed.seed_users())
        cache.customers.replace_all(customers if customers else seed.seed_customers())
        cache.categories.replace_all(categories if categories else seed.seed_categories())

        if orders:
            cache.orders.replace_all(orders)
        elif not connected:
            cache.orders.replace_all(seed.seed_orders())
        elif orders is not None:
            cache.orders.replace_all([])
        else:
            # Orders unreachable while connected: keep what is cached.
            logger.warning("Orders could not be loaded; keeping cached orders")

        # Screens and statuses are configuration: an empty remote list is authoritative.
        cache.kitchen_screens.replace_all(
            screens if screens is not None else seed.seed_kitchen_screens()
        )
        cache.order_statuses.replace_all(
            statuses if statuses is not None else seed.seed_order_statuses()
        )

        if connected:
            logger.info(
                "Loaded remote data",
                extra={"products": len(products), "orders": len(cache.orders)},
            )
        else:
            logger.warning("Remote store returned no products; running on fallback data.")
        return connected
    finally:
        state.loading = False


async def refresh(state: AppState, store: RemoteStore) -> bool:
    connected = await load_data(state, store, show_loading=False)
    state.notify("Data refreshed", NoticeType.INFO)
    return connected
