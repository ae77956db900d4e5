"""
Merge realtime change events into the local cache.

Each event is applied on its own. Inserts are idempotent (a row already
cached under the same id is left alone), updates and deletes for unknown ids
are no-ops, so replays and the echo of our own optimistic writes never
duplicate entries.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError as PydanticValidationError

from cosmo_pos.constants import ChangeOperation
from cosmo_pos.state import LocalStateCache
from cosmo_pos.supabase.realtime import ChangeEvent

logger = logging.getLogger(__name__)


def apply_event(cache: LocalStateCache, event: ChangeEvent) -> bool:
    """
    Apply one change event. Returns True when the cache changed.
    """
    collection = cache.collection_for(event.table)
    if collection is None:
        logger.warning(f"Dropping realtime event for unknown table '{event.table}'")
        return False

    record_id = event.record_id
    if record_id is None:
        logger.warning(
            f"Dropping {event.operation.value} on {event.table} without an id",
            extra={"table": event.table},
        )
        return False

    if event.operation == ChangeOperation.DELETE:
        return collection.delete(record_id)

    try:
        item = collection.model.model_validate(event.record)
    except PydanticValidationError as exc:
        logger.warning(
            f"Dropping malformed {event.operation.value} on {event.table}",
            extra={"record_id": str(record_id), "errors": exc.error_count()},
        )
        return False

    if event.operation == ChangeOperation.INSERT:
        return collection.insert(item)
    return collection.update(item)


class ReconciliationWorker:
    """
    Sole consumer of the change queue. Runs on the controller's loop.
    """

    def __init__(self, cache: LocalStateCache, queue: asyncio.Queue):
        self.cache = cache
        self.queue = queue
        self.applied = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self.run_forever())
        return self._task

    async def run_forever(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                if apply_event(self.cache, event):
                    self.applied += 1
            except Exception:
                logger.exception(f"Failed to apply realtime event on {event.table}")
            finally:
                self.queue.task_done()

    async def drain(self) -> int:
        """Apply everything currently queued without waiting for more."""
        count = 0
        while not self.queue.empty():
            event = self.queue.get_nowait()
            try:
                if apply_event(self.cache, event):
                    self.applied += 1
                count += 1
            finally:
                self.queue.task_done()
        return count

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
