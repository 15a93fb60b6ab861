"""In-process publish/subscribe feed of configuration snapshots.

Every event is a full snapshot of one collection (config, venues or tiers),
so subscribers overwrite their cached copy instead of merging. Delivery is
best-effort: a subscriber whose event loop has gone away is dropped.
"""

import asyncio
import threading
from typing import Any

from lumina.models import FeedEventType
from lumina.utils.logging import get_logger

logger = get_logger(__name__)

_event_feed_instance: "EventFeed | None" = None


class Subscription:
    """One subscriber's queue, bound to the event loop that consumes it."""

    def __init__(self, loop: asyncio.AbstractEventLoop, max_pending: int = 100) -> None:
        self.loop = loop
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_pending)

    def deliver(self, event: dict[str, Any]) -> None:
        # Runs on the subscriber's loop
        if self.queue.full():
            self.queue.get_nowait()
        self.queue.put_nowait(event)

    async def get(self) -> dict[str, Any]:
        return await self.queue.get()


class EventFeed:
    """Fan-out of snapshot events to every open subscription.

    `publish` is synchronous and thread-safe so it can be called from
    services running in FastAPI's worker threads.
    """

    def __init__(self) -> None:
        self._subscriptions: set[Subscription] = set()
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        """Register a subscription on the running event loop."""
        subscription = Subscription(asyncio.get_running_loop())
        with self._lock:
            self._subscriptions.add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.discard(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event_type: FeedEventType, data: Any) -> int:
        """Send a snapshot to every subscriber.

        Args:
            event_type: Which collection the snapshot replaces
            data: JSON-serializable snapshot

        Returns:
            Number of subscribers the event was handed to
        """
        event = {"type": event_type.value, "data": data}
        with self._lock:
            subscriptions = list(self._subscriptions)

        delivered = 0
        for subscription in subscriptions:
            try:
                subscription.loop.call_soon_threadsafe(subscription.deliver, event)
                delivered += 1
            except RuntimeError:
                # Loop closed
                self.unsubscribe(subscription)

        logger.debug("Published %s to %d subscribers", event_type.value, delivered)
        return delivered


def get_event_feed() -> EventFeed:
    """Get the process-wide event feed."""
    global _event_feed_instance
    if _event_feed_instance is None:
        _event_feed_instance = EventFeed()
    return _event_feed_instance


def reset_event_feed() -> None:
    """Drop the process-wide event feed (for testing only)."""
    global _event_feed_instance
    _event_feed_instance = None
