"""In-app alert helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.alert import Alert, AlertSeverity
from app.schemas.alert import AlertRead
from app.services.change_feed import ChangeFeed, default_feed

_TABLE = "alerts"


def build_alert(
    *, user_id: UUID, message: str, severity: AlertSeverity = AlertSeverity.MEDIUM
) -> Alert:
    return Alert(
        user_id=user_id,
        message=message,
        severity=severity,
        read=False,
        created_at=datetime.now(UTC),
    )


def publish_alert(alert: Alert, event_type: str, feed: ChangeFeed | None = None) -> None:
    (feed or default_feed).publish(
        _TABLE,
        event_type,
        user_id=alert.user_id,
        record=AlertRead.model_validate(alert).model_dump(mode="json"),
    )


async def create_alert(
    session: AsyncSession,
    *,
    user_id: UUID,
    message: str,
    severity: AlertSeverity = AlertSeverity.MEDIUM,
    feed: ChangeFeed | None = None,
) -> Alert:
    alert = build_alert(user_id=user_id, message=message, severity=severity)
    session.add(alert)
    await session.commit()
    publish_alert(alert, "INSERT", feed)
    return alert


async def get_alerts(
    session: AsyncSession, *, user_id: UUID, limit: int = 20
) -> list[Alert]:
    stmt = (
        select(Alert)
        .where(Alert.user_id == user_id)
        .order_by(Alert.created_at.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def mark_alert_as_read(
    session: AsyncSession,
    *,
    alert_id: UUID,
    user_id: UUID,
    feed: ChangeFeed | None = None,
) -> Alert:
    alert = await session.get(Alert, alert_id)
    if alert is None or alert.user_id != user_id:
        raise ValueError("Alert not found")
    alert.read = True
    await session.commit()
    publish_alert(alert, "UPDATE", feed)
    return alert


async def mark_all_alerts_as_read(
    session: AsyncSession,
    *,
    user_id: UUID,
    feed: ChangeFeed | None = None,
) -> int:
    stmt = select(Alert).where(Alert.user_id == user_id, Alert.read.is_(False))
    result = await session.execute(stmt)
    alerts = list(result.scalars().all())
    for alert in alerts:
        alert.read = True
    await session.commit()
    for alert in alerts:
        publish_alert(alert, "UPDATE", feed)
    return len(alerts)
