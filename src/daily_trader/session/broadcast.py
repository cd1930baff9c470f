"""Snapshot broadcasting — a per-kind subscriber registry and the timer that drives it."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from daily_trader.domain.models import MessageKind, SnapshotMessage

logger = logging.getLogger(__name__)

Subscriber = Callable[[SnapshotMessage], Any]


class SnapshotBroker:
    """Delivers snapshot messages to the subscribers of each message kind.

    Publishing is synchronous: every subscriber has been called when ``publish``
    returns. A subscriber that raises is logged and skipped.
    """

    def __init__(self) -> None:
        self._subscribers: dict[MessageKind, list[Subscriber]] = {}

    def subscribe(self, kind: MessageKind, callback: Subscriber) -> None:
        self._subscribers.setdefault(kind, []).append(callback)
        logger.debug("Subscribed to %s", kind.value)

    def unsubscribe(self, kind: MessageKind, callback: Subscriber) -> None:
        listeners = self._subscribers.get(kind, [])
        if callback in listeners:
            listeners.remove(callback)
            logger.debug("Unsubscribed from %s", kind.value)

    def subscriber_count(self, kind: MessageKind) -> int:
        return len(self._subscribers.get(kind, []))

    def publish(self, kind: MessageKind, data: Any) -> SnapshotMessage:
        message = SnapshotMessage(type=kind, data=data)
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._subscribers.get(kind, [])):
            try:
                callback(message)
            except Exception as e:
                logger.error("Subscriber for %s failed: %s", kind.value, e)
        return message

    def clear(self) -> None:
        self._subscribers.clear()


class BroadcastLoop:
    """Calls ``on_tick`` every ``interval_seconds`` on the running event loop.

    The loop is only a trigger: ``on_tick`` does the work and can be called
    directly without a timer.
    """

    def __init__(self, on_tick: Callable[[], object], *, interval_seconds: float = 3.0) -> None:
        self._on_tick = on_tick
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ticks(self) -> int:
        return self._ticks

    def start(self, *, max_ticks: int | None = None) -> None:
        """Start ticking in a background task. No-op if already running."""
        if self.running:
            return
        self._ticks = 0
        self._task = asyncio.create_task(self._run(max_ticks), name="snapshot-broadcast")
        logger.info("Broadcast loop started (every %.1fs)", self._interval)

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("Broadcast loop stopped after %d ticks", self._ticks)

    async def wait(self) -> None:
        """Wait for a bounded loop (``max_ticks``) to finish on its own."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self, max_ticks: int | None) -> None:
        loop = asyncio.get_running_loop()
        while max_ticks is None or self._ticks < max_ticks:
            await asyncio.sleep(self._interval)
            started = loop.time()
            try:
                self._on_tick()
            except Exception as e:
                logger.error("Broadcast tick failed: %s", e)
            self._ticks += 1

            elapsed = loop.time() - started
            if elapsed > self._interval:
                logger.warning(
                    "Tick took %.2fs (exceeds %.1fs interval)", elapsed, self._interval
                )
