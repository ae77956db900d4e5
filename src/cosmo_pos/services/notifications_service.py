"""
Receipt notifications (email / SMS) via Supabase edge functions.

Delivery is best effort. When the edge function is unreachable and
``notifications_simulate_success`` is on, a simulated success is reported
after a short delay so the till flow is not blocked.
"""

from __future__ import annotations

import asyncio
import logging

from cosmo_pos.config import AppConfig
from cosmo_pos.constants import EMAIL_RECEIPT_FUNCTION, SMS_RECEIPT_FUNCTION
from cosmo_pos.schemas import Order, StoreSettings
from cosmo_pos.services.price_service import DEFAULT_CURRENCY_SYMBOL, format_money, line_total
from cosmo_pos.supabase.client import RemoteStore
from cosmo_pos.validation import validate_email, validate_phone

logger = logging.getLogger(__name__)


def format_receipt_text(
    order: Order,
    store_settings: StoreSettings | None = None,
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> str:
    """Plain-text receipt used as the SMS body."""
    store_name = store_settings.name if store_settings else "Cosmo Dumplings"
    order_date = order.date.split(",")[0]
    lines = [
        f"{item.quantity}x {item.product.name} ({symbol}{line_total(item):.0f})"
        for item in order.items
    ]
    return "\n".join(
        [
            f"Receipt from {store_name}",
            f"Order: {order.id}",
            f"Date: {order_date}",
            "",
            "Items:",
            *lines,
            "",
            f"Total: {format_money(order.total, symbol)}",
            "Thank you!",
        ]
    )


class NotificationsService:
    def __init__(self, store: RemoteStore, config: AppConfig):
        self.store = store
        self.simulate_success = config.notifications_simulate_success
        self.simulated_delay = config.notifications_simulated_delay
        self.currency_symbol = config.currency_symbol

    async def _deliver(self, function_name: str, body: dict, context: dict) -> bool:
        try:
            await self.store.invoke_function(function_name, body)
        except Exception as exc:
            if not self.simulate_success:
                logger.error(
                    f"Receipt delivery failed: {exc}",
                    extra={**context, "function": function_name},
                )
                return False
            logger.warning(
                f"Edge function {function_name} unavailable; simulating delivery",
                extra={**context, "error": str(exc)},
            )
            await asyncio.sleep(self.simulated_delay)
            return True

        logger.info("Receipt delivered", extra={**context, "function": function_name})
        return True

    async def send_receipt_email(
        self, email: str, order: Order, store_settings: StoreSettings | None = None
    ) -> bool:
        validate_email(email)
        store_name = store_settings.name if store_settings else "Cosmo Dumplings"
        body = {
            "to": email,
            "order": order.model_dump(by_alias=True, mode="json"),
            "subject": f"{store_name} Receipt - {order.id}",
        }
        logger.info(f"Sending receipt email for order {order.id}", extra={"email": email})
        return await self._deliver(
            EMAIL_RECEIPT_FUNCTION, body, {"order_id": order.id, "email": email}
        )

    async def send_receipt_sms(
        self,
        phone: str,
        order: Order,
        message: str | None = None,
        store_settings: StoreSettings | None = None,
    ) -> bool:
        validate_phone(phone)
        body = {
            "phone": phone,
            "order": order.model_dump(by_alias=True, mode="json"),
            "message": message
            or format_receipt_text(order, store_settings, self.currency_symbol),
        }
        logger.info(f"Sending receipt SMS for order {order.id}", extra={"phone": phone})
        return await self._deliver(
            SMS_RECEIPT_FUNCTION, body, {"order_id": order.id, "phone": phone}
        )
