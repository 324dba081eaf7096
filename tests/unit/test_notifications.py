"""
Unit tests for the book-added channel.
"""

from __future__ import annotations

import asyncio

import pytest

from library_back.notifications import BookAdded, BookAddedChannel, ChannelClosedError


def event(title: str) -> BookAdded:
    return BookAdded(book=title)


class TestPublish:
    """Test fan-out to subscribers."""

    @pytest.mark.asyncio
    async def test_events_arrive_in_order(self) -> None:
        channel = BookAddedChannel()
        subscription = channel.subscribe()

        channel.publish(event("first"))
        channel.publish(event("second"))

        assert (await subscription.__anext__()).book == "first"
        assert (await subscription.__anext__()).book == "second"

    @pytest.mark.asyncio
    async def test_every_subscriber_receives_event(self) -> None:
        channel = BookAddedChannel()
        first = channel.subscribe()
        second = channel.subscribe()

        delivered = channel.publish(event("The Hobbit"))

        assert delivered == 2
        assert (await first.__anext__()).book == "The Hobbit"
        assert (await second.__anext__()).book == "The Hobbit"

    @pytest.mark.asyncio
    async def test_late_subscriber_gets_no_replay(self) -> None:
        channel = BookAddedChannel()
        channel.publish(event("before"))

        subscription = channel.subscribe()
        channel.publish(event("after"))

        assert subscription.pending == 1
        assert (await subscription.__anext__()).book == "after"

    def test_publish_without_subscribers(self) -> None:
        channel = BookAddedChannel()

        assert channel.publish(event("nobody listening")) == 0
        assert channel.published_count == 1

    @pytest.mark.asyncio
    async def test_full_queue_drops_oldest(self) -> None:
        """A slow subscriber never blocks the publisher."""
        channel = BookAddedChannel(queue_size=2)
        subscription = channel.subscribe()

        for title in ("one", "two", "three"):
            channel.publish(event(title))

        assert channel.dropped_count == 1
        assert subscription.pending == 2
        assert (await subscription.__anext__()).book == "two"
        assert (await subscription.__anext__()).book == "three"


class TestSubscriptionLifecycle:
    @pytest.mark.asyncio
    async def test_close_subscription_unregisters(self) -> None:
        channel = BookAddedChannel()
        subscription = channel.subscribe()
        assert channel.subscriber_count == 1

        subscription.close()

        assert channel.subscriber_count == 0
        assert channel.publish(event("ignored")) == 0
        with pytest.raises(StopAsyncIteration):
            await subscription.__anext__()

    @pytest.mark.asyncio
    async def test_channel_close_ends_iteration(self) -> None:
        channel = BookAddedChannel()
        subscription = channel.subscribe()
        channel.publish(event("last"))

        await channel.close()

        received = [e.book async for e in subscription]
        assert received == ["last"]
        assert channel.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_consumer(self) -> None:
        channel = BookAddedChannel()
        subscription = channel.subscribe()

        async def consume() -> list[BookAdded]:
            return [e async for e in subscription]

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        await channel.close()

        assert await asyncio.wait_for(task, timeout=1) == []

    @pytest.mark.asyncio
    async def test_subscribe_after_close_raises(self) -> None:
        channel = BookAddedChannel()
        await channel.close()

        assert channel.is_closed
        with pytest.raises(ChannelClosedError):
            channel.subscribe()

    @pytest.mark.asyncio
    async def test_publish_after_close_is_ignored(self) -> None:
        channel = BookAddedChannel()
        await channel.close()

        assert channel.publish(event("late")) == 0
