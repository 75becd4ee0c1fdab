"""Dose tracking endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.config import get_settings
from app.models.alert import AlertSeverity
from app.models.user import User
from app.schemas.tracking import MarkTakenRequest, TrackingHistoryRead, TrackingRead
from app.services import alert_service, medication_service, tracking_service
from app.services.change_feed import ChangeFeed
from app.services.dose_schedule import format_time, localize

router = APIRouter(prefix="/tracking")


def _today():
    return localize(None, get_settings().app_timezone).date()


@router.post("/taken", response_model=TrackingRead, summary="Mark a dose as taken")
async def mark_taken(
    payload: MarkTakenRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> TrackingRead:
    medication = await medication_service.get_medication(
        session, user_id=current_user.id, medication_id=payload.medication_id
    )
    if medication is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Medication not found")
    medication_name = medication.name
    try:
        record = await tracking_service.mark_medication_as_taken(
            session,
            medication=medication,
            scheduled_time=payload.scheduled_time,
            tracking_date=payload.tracking_date or _today(),
            feed=feed,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await alert_service.create_alert(
        session,
        user_id=current_user.id,
        message=f"{medication_name} was taken at {format_time(record.scheduled_time)}",
        severity=AlertSeverity.LOW,
        feed=feed,
    )
    return TrackingRead.model_validate(record)


@router.get("/today", response_model=list[TrackingRead], summary="Today's tracking")
async def todays_tracking(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> list[TrackingRead]:
    records = await tracking_service.get_todays_tracking(
        session, user_id=current_user.id, tracking_date=_today()
    )
    return [TrackingRead.model_validate(obj) for obj in records]


@router.get("/history", response_model=list[TrackingHistoryRead], summary="Tracking history")
async def tracking_history(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    days: Annotated[int, Query(ge=1, le=365)] = 7,
) -> list[TrackingHistoryRead]:
    return await tracking_service.get_tracking_history(
        session, user_id=current_user.id, days=days, today=_today()
    )
