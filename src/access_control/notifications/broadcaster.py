"""Fan-out of attendance changes to live server-sent-event subscribers.

Delivery is best effort and at most once: an event reaches the subscribers
connected at the moment it is published, nothing is buffered for later
subscribers and nothing is acknowledged.
"""
from __future__ import annotations

import json
import logging
import queue
import threading
from typing import Any, Iterator, Optional

from ..core.constants import DEFAULT_KEEPALIVE_SECONDS
from ..core.enums import EventType

logger = logging.getLogger(__name__)

_CLOSE = object()


def format_sse(payload: str) -> str:
    return f"data: {payload}\n\n"


class Subscription:
    """One connected stream. Owns a bounded queue of serialized events."""

    def __init__(self, broadcaster: "UpdateBroadcaster", *, max_pending: int):
        self._broadcaster = broadcaster
        self._queue: queue.Queue = queue.Queue(maxsize=max_pending)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def offer(self, payload: str) -> bool:
        """Queue a serialized event; False when this subscriber cannot take it."""

        if self.closed:
            return False
        try:
            self._queue.put_nowait(payload)
        except queue.Full:
            return False
        return True

    def next_event(self, timeout: float) -> Optional[str]:
        """Block for the next serialized event; None on timeout or close."""

        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSE:
            return None
        return item

    def events(self, *, keepalive_seconds: Optional[float] = None) -> Iterator[str]:
        """Yield SSE frames until the peer disconnects or the stream is closed.

        A keepalive frame is produced whenever nothing was published for
        ``keepalive_seconds``. Closing the generator (which is what the WSGI
        server does when the client goes away) deregisters the subscription.
        """

        interval = keepalive_seconds or self._broadcaster.keepalive_seconds
        try:
            while not self.closed:
                payload = self.next_event(interval)
                if self.closed:
                    break
                if payload is None:
                    payload = self._broadcaster.serialize({"type": EventType.KEEPALIVE.value})
                yield format_sse(payload)
        finally:
            self.close()

    def close(self) -> None:
        if self.closed:
            return
        self._closed.set()
        try:
            self._queue.put_nowait(_CLOSE)
        except queue.Full:
            pass
        self._broadcaster.unsubscribe(self)


class UpdateBroadcaster:
    """Owns the subscriber set; safe to use from many request threads."""

    def __init__(self, *, keepalive_seconds: float = DEFAULT_KEEPALIVE_SECONDS, max_pending: int = 100):
        self.keepalive_seconds = float(keepalive_seconds)
        self._max_pending = int(max_pending)
        self._lock = threading.Lock()
        self._subscribers: set[Subscription] = set()

    @staticmethod
    def serialize(event: dict[str, Any]) -> str:
        return json.dumps(event, default=str)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, max_pending=self._max_pending)
        subscription.offer(self.serialize({"type": EventType.CONNECTED.value, "message": "Connected to attendance stream"}))
        with self._lock:
            self._subscribers.add(subscription)
            count = len(self._subscribers)
        logger.info("Stream subscriber connected (%d active)", count)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription not in self._subscribers:
                return
            self._subscribers.discard(subscription)
            count = len(self._subscribers)
        logger.info("Stream subscriber disconnected (%d active)", count)

    def broadcast(self, event: dict[str, Any]) -> int:
        """Deliver ``event`` to every current subscriber; returns how many got it."""

        payload = self.serialize(event)
        with self._lock:
            targets = list(self._subscribers)

        delivered = 0
        for subscription in targets:
            if subscription.offer(payload):
                delivered += 1
            else:
                logger.warning("Dropping stream subscriber that stopped reading")
                subscription.close()
        return delivered

    def publish_attendance(self, record_json: dict[str, Any], *, action: str) -> int:
        update = dict(record_json)
        update["action"] = action
        return self.broadcast({"type": EventType.ATTENDANCE_UPDATE.value, "update": update})
