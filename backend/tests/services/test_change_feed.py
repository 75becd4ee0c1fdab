"""Realtime change feed tests."""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from app.services.change_feed import ChangeFeed

pytestmark = pytest.mark.asyncio


async def test_events_are_filtered_by_table_and_user() -> None:
    feed = ChangeFeed()
    user_id, other_id = uuid4(), uuid4()

    async with feed.subscribe("alerts", user_id) as subscription:
        assert feed.publish("alerts", "INSERT", user_id=user_id, record={"id": 1}) == 1
        assert feed.publish("alerts", "INSERT", user_id=other_id, record={"id": 2}) == 0
        assert (
            feed.publish("medications", "INSERT", user_id=user_id, record={"id": 3}) == 0
        )

        event = await asyncio.wait_for(subscription.get(), timeout=1)
        assert event.record == {"id": 1}
        assert subscription.pending() == 0
        message = event.as_message()
        assert message["table"] == "alerts"
        assert message["eventType"] == "INSERT"
        assert message["new"] == {"id": 1}

    assert feed.subscriber_count() == 0


async def test_late_subscriber_gets_no_replay() -> None:
    feed = ChangeFeed()
    user_id = uuid4()
    feed.publish("alerts", "INSERT", user_id=user_id, record={"id": 1})

    async with feed.subscribe("alerts", user_id) as subscription:
        assert subscription.pending() == 0


async def test_full_queue_drops_oldest_event() -> None:
    feed = ChangeFeed(queue_size=2)
    user_id = uuid4()

    async with feed.subscribe("medication_tracking", user_id) as subscription:
        for index in range(3):
            feed.publish("medication_tracking", "UPDATE", user_id=user_id, record={"n": index})

        assert subscription.dropped == 1
        assert (await subscription.get()).record == {"n": 1}
        assert (await subscription.get()).record == {"n": 2}


async def test_subscriber_counts_and_unknown_tables() -> None:
    feed = ChangeFeed()
    user_id = uuid4()
    first = feed.subscribe("alerts", user_id)
    second = feed.subscribe("medications", user_id)

    assert feed.subscriber_count() == 2
    assert feed.subscriber_count("alerts") == 1

    first.close()
    second.close()
    second.close()
    assert feed.subscriber_count() == 0

    with pytest.raises(ValueError):
        feed.subscribe("profiles", user_id)


async def test_async_iteration_yields_published_events() -> None:
    feed = ChangeFeed()
    user_id = uuid4()
    received: list[str] = []

    async with feed.subscribe("alerts", user_id) as subscription:

        async def _consume() -> None:
            async for event in subscription:
                received.append(event.event_type)
                if len(received) == 2:
                    return

        consumer = asyncio.create_task(_consume())
        await asyncio.sleep(0)
        feed.publish("alerts", "INSERT", user_id=user_id, record={})
        feed.publish("alerts", "UPDATE", user_id=user_id, record={})
        await asyncio.wait_for(consumer, timeout=1)

    assert received == ["INSERT", "UPDATE"]
