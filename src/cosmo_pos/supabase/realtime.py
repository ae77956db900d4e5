"""
Supabase Realtime subscriptions for the POS terminal.

Each postgres change is normalized into a ``ChangeEvent`` and put on an
asyncio queue. The reconciliation worker is the only consumer, so realtime
callbacks never touch the cache themselves.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from cosmo_pos.constants import REALTIME_TABLES, ChangeOperation, Table
from cosmo_pos.logging_config import LoggerAdapter
from cosmo_pos.supabase.client import RemoteStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    operation: ChangeOperation
    record: dict[str, Any] = field(default_factory=dict)
    old_record: dict[str, Any] = field(default_factory=dict)

    @property
    def record_id(self) -> Any:
        if self.operation == ChangeOperation.DELETE:
            return self.old_record.get("id", self.record.get("id"))
        return self.record.get("id")


def normalize_change(table: str, payload: dict[str, Any]) -> ChangeEvent | None:
    """
    Build a ChangeEvent from a postgres_changes payload.

    Accepts both the raw wire shape (``data.type`` / ``data.record`` /
    ``data.old_record``) and the client-side shape (``eventType`` / ``new`` /
    ``old``).
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    raw_type = data.get("type") or data.get("eventType") or payload.get("eventType")
    try:
        operation = ChangeOperation(str(raw_type).upper())
    except ValueError:
        logger.warning(f"Ignoring realtime payload with unknown type '{raw_type}' on {table}")
        return None
    record = data.get("record") or data.get("new") or {}
    old_record = data.get("old_record") or data.get("old") or {}
    return ChangeEvent(
        table=data.get("table") or table,
        operation=operation,
        record=dict(record),
        old_record=dict(old_record),
    )


class RealtimeManager:
    """
    Owns the five realtime channels for the lifetime of the process.
    """

    def __init__(
        self,
        store: RemoteStore,
        queue: asyncio.Queue | None = None,
        tables: tuple[Table, ...] = REALTIME_TABLES,
    ):
        self.store = store
        self.queue: asyncio.Queue[ChangeEvent] = queue or asyncio.Queue()
        self.tables = tables
        self._channels: dict[str, Any] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def active_channels(self) -> list[str]:
        return list(self._channels)

    async def start(self) -> int:
        """Subscribe to every table; returns how many channels are live."""
        if not self.store.available:
            logger.info("Realtime disabled: no remote client")
            return 0

        self._loop = asyncio.get_running_loop()
        logger.info("Initializing realtime subscriptions...")
        for table in self.tables:
            name = table.value
            if name in self._channels:
                continue
            topic = f"public:{name}"
            channel_log = LoggerAdapter(logger, {"channel": topic})
            try:
                channel = self.store.client.channel(topic)
                channel.on_postgres_changes(
                    "*", schema="public", table=name, callback=self._callback_for(name)
                )
                await channel.subscribe()
            except Exception as exc:
                channel_log.error(f"Failed to subscribe: {exc}")
                continue
            self._channels[name] = channel
            channel_log.debug("Subscribed")
        return len(self._channels)

    def _callback_for(self, table: str):
        def handler(payload: dict[str, Any]) -> None:
            self.publish(table, payload)

        return handler

    def publish(self, table: str, payload: dict[str, Any]) -> ChangeEvent | None:
        """Normalize a change payload and enqueue it for reconciliation."""
        event = normalize_change(table, payload)
        if event is None:
            return None
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if self._loop is not None and running is not self._loop:
            self._loop.call_soon_threadsafe(self.queue.put_nowait, event)
        else:
            self.queue.put_nowait(event)
        return event

    async def stop(self) -> None:
        """Release every channel. Safe to call more than once."""
        channels, self._channels = self._channels, {}
        for name, channel in channels.items():
            try:
                await self.store.client.remove_channel(channel)
            except Exception as exc:
                logger.warning(f"Error removing realtime channel public:{name}: {exc}")
        if channels:
            logger.info(f"Released {len(channels)} realtime channels")
