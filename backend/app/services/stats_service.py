"""Adherence statistics for the dashboards."""
from __future__ import annotations

import uuid
from datetime import date
from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.medication import Medication
from app.schemas.alert import MedicationStats
from app.schemas.tracking import TrackingHistoryRead
from app.services import medication_service, tracking_service
from app.services.dose_schedule import count_doses

HISTORY_DAYS = 7


def calculate_adherence_rate(
    history: Sequence[TrackingHistoryRead],
    medications: Sequence[Medication],
    *,
    days: int = HISTORY_DAYS,
) -> int:
    """Percentage of scheduled doses over ``days`` days that were taken."""
    if not history or not medications:
        return 0
    total_doses = count_doses([m.time for m in medications]) * days
    if total_doses == 0:
        return 0
    taken = sum(1 for row in history if row.taken)
    return round(taken / total_doses * 100)


def _taken_on(history: Iterable[TrackingHistoryRead], day: date) -> int:
    return sum(1 for row in history if row.tracking_date == day and row.taken)


async def get_medication_stats(
    session: AsyncSession, *, user_id: uuid.UUID, today: date
) -> MedicationStats:
    medications = await medication_service.get_medications(session, user_id=user_id)
    history = await tracking_service.get_tracking_history(
        session, user_id=user_id, days=HISTORY_DAYS, today=today
    )
    total_doses_today = count_doses([m.time for m in medications])
    taken_today = _taken_on(history, today)
    return MedicationStats(
        total_medications=len(medications),
        total_doses_today=total_doses_today,
        taken_today=taken_today,
        missed_today=max(total_doses_today - taken_today, 0),
        adherence_rate=calculate_adherence_rate(history, medications),
    )
