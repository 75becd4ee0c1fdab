"""Alert service tests."""

from __future__ import annotations

import pytest

from app.db.session import get_sessionmaker
from app.models import AlertSeverity, User
from app.services import alert_service
from app.services.change_feed import ChangeFeed

pytestmark = pytest.mark.asyncio


async def test_mark_all_read_publishes_an_update_per_alert(
    patient: User, db_url: str
) -> None:
    feed = ChangeFeed()
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        first = await alert_service.create_alert(
            session, user_id=patient.id, message="first", feed=feed
        )
        await alert_service.create_alert(
            session,
            user_id=patient.id,
            message="second",
            severity=AlertSeverity.HIGH,
            feed=feed,
        )
        await alert_service.mark_alert_as_read(
            session, alert_id=first.id, user_id=patient.id, feed=feed
        )

    async with feed.subscribe("alerts", patient.id) as subscription:
        async with sessionmaker() as session:
            updated = await alert_service.mark_all_alerts_as_read(
                session, user_id=patient.id, feed=feed
            )

        assert updated == 1
        assert subscription.pending() == 1
        event = await subscription.get()
        assert event.event_type == "UPDATE"
        assert event.record["message"] == "second"
        assert event.record["read"] is True

        async with sessionmaker() as session:
            again = await alert_service.mark_all_alerts_as_read(
                session, user_id=patient.id, feed=feed
            )
        assert again == 0
        assert subscription.pending() == 0
