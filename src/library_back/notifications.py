"""
Book-added notifications for GraphQL subscriptions.

``BookAddedChannel`` is a single-topic, in-memory fan-out:

- ``publish()`` never blocks. Each subscriber owns a bounded queue; when it
  is full the oldest undelivered event is dropped.
- ``subscribe()`` registers immediately and yields events published after
  it returned, in order. Nothing is replayed to late subscribers.
- ``close()`` ends every active subscription.

The application lifespan creates one channel per process and stores it on
``app.state``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

BOOK_ADDED = "BOOK_ADDED"

# Sentinel pushed into queues on close()
_CLOSED = object()


@dataclass(frozen=True)
class BookAdded:
    """A published book-added event; ``book.author`` is already loaded."""

    book: Any


class ChannelClosedError(RuntimeError):
    """Raised when subscribing to a closed channel."""


class Subscription:
    """Async iterator over the events of one subscriber."""

    def __init__(self, channel: BookAddedChannel, sub_id: str, queue: asyncio.Queue[Any]) -> None:
        self.channel = channel
        self.id = sub_id
        self._queue = queue
        self._done = False

    @property
    def pending(self) -> int:
        """Events queued but not yet consumed."""
        return self._queue.qsize()

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> BookAdded:
        if self._done:
            raise StopAsyncIteration
        event = await self._queue.get()
        if event is _CLOSED:
            self.close()
            raise StopAsyncIteration
        return event

    def close(self) -> None:
        """Stop receiving events."""
        if not self._done:
            self._done = True
            self.channel._remove(self.id)


class BookAddedChannel:
    """Publish/subscribe channel for the ``BOOK_ADDED`` topic."""

    topic = BOOK_ADDED

    def __init__(self, queue_size: int = 100) -> None:
        self.queue_size = queue_size
        self._queues: dict[str, asyncio.Queue[Any]] = {}
        self._closed = False
        self.published_count = 0
        self.dropped_count = 0

    @property
    def subscriber_count(self) -> int:
        """Number of active subscriptions."""
        return len(self._queues)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def publish(self, event: BookAdded) -> int:
        """
        Deliver an event to every current subscriber.

        Args:
            event: The event to publish

        Returns:
            Number of subscribers the event was queued for
        """
        if self._closed:
            return 0

        self.published_count += 1
        for sub_id, queue in list(self._queues.items()):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                # Drop the oldest event so the newest is always delivered
                queue.get_nowait()
                queue.put_nowait(event)
                self.dropped_count += 1
                logger.warning("Subscriber %s is lagging; dropped oldest %s event", sub_id, self.topic)

        return len(self._queues)

    def subscribe(self) -> Subscription:
        """
        Register a subscriber.

        Raises:
            ChannelClosedError: If the channel has been closed
        """
        if self._closed:
            raise ChannelClosedError(f"{self.topic} channel is closed")
        sub_id = str(uuid4())
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=self.queue_size)
        self._queues[sub_id] = queue
        logger.debug("Subscriber %s joined %s", sub_id, self.topic)
        return Subscription(self, sub_id, queue)

    def _remove(self, sub_id: str) -> None:
        if self._queues.pop(sub_id, None) is not None:
            logger.debug("Subscriber %s left %s", sub_id, self.topic)

    async def close(self) -> None:
        """End all subscriptions and refuse new ones."""
        self._closed = True
        for queue in list(self._queues.values()):
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(_CLOSED)
        logger.info("%s channel closed (%d subscribers)", self.topic, len(self._queues))
