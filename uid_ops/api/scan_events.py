"""In-process broadcast of "a record became complete" pulses.

Listeners (SSE connections) each own a bounded queue. Publishing never blocks
and never raises: a full or closed listener queue is logged and skipped.
There is no backlog; a listener only sees pulses published while subscribed.
"""

import asyncio
import threading
from datetime import datetime
from typing import Any

from uid_ops.config import SSE_QUEUE_MAX
from uid_ops.utils.dates import to_utc_iso, utc_now_iso
from uid_ops.utils.logger import get_logger

logger = get_logger("uid_ops.api.scan_events")


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription:
    """Handle returned by ScanEventHub.subscribe(); close() (or leaving the with-block) deregisters."""

    def __init__(self, hub: "ScanEventHub", maxsize: int):
        self._hub = hub
        self._loop = _running_loop()
        self.queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def _put(self, payload: dict[str, Any] | None) -> None:
        try:
            self.queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("scan_events.dropped", reason="queue_full", queue_max=self.queue.maxsize)

    def deliver(self, payload: dict[str, Any] | None) -> None:
        """Enqueue a pulse, hopping onto the listener's loop when called from another thread."""
        loop = self._loop
        if loop is not None and not loop.is_closed() and _running_loop() is not loop:
            loop.call_soon_threadsafe(self._put, payload)
        else:
            self._put(payload)

    async def get(self, timeout: float | None = None) -> dict[str, Any] | None:
        """Next pulse; None means the hub shut down. Raises asyncio.TimeoutError on timeout."""
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout=timeout)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._hub._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class ScanEventHub:
    """Registry of live listeners. Created with the app, closed at shutdown."""

    def __init__(self, queue_max: int = SSE_QUEUE_MAX):
        self._queue_max = max(1, queue_max)
        self._lock = threading.Lock()
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        sub = Subscription(self, self._queue_max)
        with self._lock:
            self._subscribers.add(sub)
        logger.debug("scan_events.subscribed", subscribers=len(self._subscribers))
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(sub)
        logger.debug("scan_events.unsubscribed", subscribers=len(self._subscribers))

    def publish(self, ts: str | datetime | None = None) -> int:
        """Send {"ts": ...} to every current listener. Returns how many were attempted."""
        if isinstance(ts, datetime):
            ts = to_utc_iso(ts)
        payload = {"ts": ts or utc_now_iso()}
        with self._lock:
            targets = list(self._subscribers)
        for sub in targets:
            try:
                sub.deliver(payload)
            except Exception as e:
                logger.warning("scan_events.delivery_error", error=str(e))
        logger.debug("scan_events.published", ts=payload["ts"], listeners=len(targets))
        return len(targets)

    def close(self) -> None:
        """Wake every listener with an end-of-stream marker and clear the registry."""
        with self._lock:
            targets = list(self._subscribers)
            self._subscribers.clear()
        for sub in targets:
            sub.closed = True
            while True:
                try:
                    sub.queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
            try:
                sub.deliver(None)
            except Exception as e:
                logger.debug("scan_events.close_error", error=str(e))
        logger.info("scan_events.closed", listeners=len(targets))
