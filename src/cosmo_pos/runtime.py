"""
Event loop plumbing shared by the controller and the HTTP layer.

``LoopRunner`` owns one asyncio loop on a daemon thread; request threads hand
coroutines to it and block on the result. ``BackgroundWrites`` tracks the
fire-and-forget remote writes issued after optimistic local changes so their
failures land on the error channel and shutdown can wait for them.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Coroutine
from typing import Any, TypeVar

from cosmo_pos.state import AppState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoopRunner:
    def __init__(self, name: str = "cosmo-pos-loop"):
        self.name = name
        self.loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> asyncio.AbstractEventLoop:
        if self.running:
            return self.loop
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        self._ready.wait()
        return self.loop

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self.loop = loop
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run a coroutine on the loop thread and wait for its result."""
        if not self.running or self.loop is None:
            coro.close()
            raise RuntimeError("Event loop is not running")
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return future.result(timeout)

    def stop(self) -> None:
        if not self.running or self.loop is None:
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()
        self._thread = None
        self.loop = None


class BackgroundWrites:
    """
    Tracks remote writes that follow an optimistic local change.

    A write that raises, or that the remote adapter reports as failed
    (``None`` / ``False``), is logged and recorded on ``AppState.errors``.
    Local state is never rolled back.
    """

    def __init__(self, state: AppState):
        self.state = state
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, context: str, awaitable: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(lambda done: self._finished(context, done))
        return task

    def _finished(self, context: str, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            self.state.record_error(context, "cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Background write failed ({context}): {exc}")
            self.state.record_error(context, str(exc))
            return
        result = task.result()
        if result is None or result is False:
            logger.error(f"Background write not persisted ({context})")
            self.state.record_error(context, "remote write failed")

    async def drain(self) -> None:
        """Wait for every tracked write to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
