"""Medication services."""
from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.medication import Medication
from app.models.tracking import MedicationTracking
from app.schemas.medication import (
    MedicationCreate,
    MedicationRead,
    MedicationUpdate,
    MedicationWithStatus,
)
from app.services.change_feed import ChangeFeed, default_feed

_TABLE = "medications"


def _publish(feed: ChangeFeed | None, event_type: str, medication: Medication) -> None:
    (feed or default_feed).publish(
        _TABLE,
        event_type,
        user_id=medication.user_id,
        record=MedicationRead.model_validate(medication).model_dump(mode="json"),
    )


async def get_medications(
    session: AsyncSession, *, user_id: uuid.UUID
) -> list[Medication]:
    """Return the user's medications, newest first."""
    stmt: Select[tuple[Medication]] = (
        select(Medication)
        .where(Medication.user_id == user_id)
        .order_by(Medication.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_medication(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    medication_id: uuid.UUID,
) -> Medication | None:
    medication = await session.get(Medication, medication_id)
    if medication is None or medication.user_id != user_id:
        return None
    return medication


async def add_medication(
    session: AsyncSession,
    payload: MedicationCreate,
    *,
    user_id: uuid.UUID,
    feed: ChangeFeed | None = None,
) -> Medication:
    medication = Medication(user_id=user_id, **payload.model_dump())
    session.add(medication)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(medication)
    _publish(feed, "INSERT", medication)
    return medication


async def update_medication(
    session: AsyncSession,
    *,
    medication: Medication,
    payload: MedicationUpdate,
    feed: ChangeFeed | None = None,
) -> Medication:
    updates = payload.model_dump(exclude_unset=True)
    for field in ("name", "dosage", "time"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be empty")
    for field, value in updates.items():
        if field in ("frequency", "type") and value is None:
            continue
        setattr(medication, field, value)
    await session.commit()
    await session.refresh(medication)
    _publish(feed, "UPDATE", medication)
    return medication


async def delete_medication(
    session: AsyncSession,
    *,
    medication: Medication,
    feed: ChangeFeed | None = None,
) -> None:
    record = MedicationRead.model_validate(medication).model_dump(mode="json")
    user_id = medication.user_id
    await session.delete(medication)
    await session.commit()
    (feed or default_feed).publish(_TABLE, "DELETE", user_id=user_id, record=record)


async def get_medications_with_today_status(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    tracking_date: date,
) -> list[MedicationWithStatus]:
    """Combine each medication with the slots already taken on ``tracking_date``."""
    medications = await get_medications(session, user_id=user_id)
    result = await session.execute(
        select(MedicationTracking.medication_id, MedicationTracking.scheduled_time).where(
            MedicationTracking.user_id == user_id,
            MedicationTracking.tracking_date == tracking_date,
            MedicationTracking.taken.is_(True),
        )
    )
    taken_by_medication: dict[uuid.UUID, list[str]] = {}
    for medication_id, scheduled_time in result.all():
        taken_by_medication.setdefault(medication_id, []).append(scheduled_time)

    rows: list[MedicationWithStatus] = []
    for medication in medications:
        taken_times = sorted(taken_by_medication.get(medication.id, []))
        base = MedicationRead.model_validate(medication)
        rows.append(
            MedicationWithStatus(
                **base.model_dump(), taken=bool(taken_times), taken_times=taken_times
            )
        )
    return rows
