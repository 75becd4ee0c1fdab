"""Dose tracking services."""
from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.medication import Medication
from app.models.tracking import MedicationTracking
from app.schemas.tracking import TrackingHistoryRead, TrackingRead
from app.services.change_feed import ChangeFeed, default_feed
from app.services.dose_schedule import parse_times

_TABLE = "medication_tracking"


async def find_tracking(
    session: AsyncSession,
    *,
    medication_id: uuid.UUID,
    tracking_date: date,
    scheduled_time: str,
) -> MedicationTracking | None:
    """Look up the record for one dose by its natural key."""
    stmt = select(MedicationTracking).where(
        MedicationTracking.medication_id == medication_id,
        MedicationTracking.tracking_date == tracking_date,
        MedicationTracking.scheduled_time == scheduled_time,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def mark_medication_as_taken(
    session: AsyncSession,
    *,
    medication: Medication,
    scheduled_time: str,
    tracking_date: date,
    now: datetime | None = None,
    feed: ChangeFeed | None = None,
) -> MedicationTracking:
    """Record a dose as taken, creating the tracking row if needed.

    Repeated calls for the same dose update the single existing row, so the
    natural key ``(medication, date, scheduled_time)`` never has duplicates.
    """

    if scheduled_time not in parse_times(medication.time):
        raise ValueError("Scheduled time is not part of this medication's schedule")
    taken_at = now or datetime.now(UTC)
    medication_id = medication.id
    user_id = medication.user_id

    record = await find_tracking(
        session,
        medication_id=medication_id,
        tracking_date=tracking_date,
        scheduled_time=scheduled_time,
    )
    event_type = "UPDATE"
    if record is None:
        event_type = "INSERT"
        record = MedicationTracking(
            medication_id=medication_id,
            user_id=user_id,
            scheduled_time=scheduled_time,
            tracking_date=tracking_date,
        )
        session.add(record)
    record.taken = True
    record.taken_at = taken_at
    try:
        await session.commit()
    except IntegrityError:
        # a concurrent request inserted the same dose first
        await session.rollback()
        record = await find_tracking(
            session,
            medication_id=medication_id,
            tracking_date=tracking_date,
            scheduled_time=scheduled_time,
        )
        if record is None:
            raise
        event_type = "UPDATE"
        record.taken = True
        record.taken_at = taken_at
        await session.commit()
    await session.refresh(record)

    (feed or default_feed).publish(
        _TABLE,
        event_type,
        user_id=record.user_id,
        record=TrackingRead.model_validate(record).model_dump(mode="json"),
    )
    return record


async def get_todays_tracking(
    session: AsyncSession, *, user_id: uuid.UUID, tracking_date: date
) -> list[MedicationTracking]:
    stmt = select(MedicationTracking).where(
        MedicationTracking.user_id == user_id,
        MedicationTracking.tracking_date == tracking_date,
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_tracking_history(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    days: int = 7,
    today: date | None = None,
) -> list[TrackingHistoryRead]:
    """Return tracking rows from the last ``days`` days, newest date first."""
    end_date = today or datetime.now(UTC).date()
    start_date = end_date - timedelta(days=days)
    stmt = (
        select(MedicationTracking)
        .options(selectinload(MedicationTracking.medication))
        .where(
            MedicationTracking.user_id == user_id,
            MedicationTracking.tracking_date >= start_date,
            MedicationTracking.tracking_date <= end_date,
        )
        .order_by(MedicationTracking.tracking_date.desc())
    )
    result = await session.execute(stmt)
    history = []
    for record in result.scalars().all():
        row = TrackingHistoryRead.model_validate(record)
        if record.medication is not None:
            row.medication_name = record.medication.name
            row.medication_dosage = record.medication.dosage
        history.append(row)
    return history
