"""Medication API endpoints."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.config import get_settings
from app.models.medication import Medication
from app.models.user import User
from app.schemas.medication import (
    MedicationCreate,
    MedicationRead,
    MedicationUpdate,
    MedicationWithStatus,
)
from app.services import medication_service
from app.services.change_feed import ChangeFeed
from app.services.dose_schedule import localize

router = APIRouter(prefix="/medications")


async def _get_owned_medication(
    session: AsyncSession, user: User, medication_id: uuid.UUID
) -> Medication:
    medication = await medication_service.get_medication(
        session, user_id=user.id, medication_id=medication_id
    )
    if medication is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Medication not found")
    return medication


@router.get("", response_model=list[MedicationRead], summary="List medications")
async def list_medications(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> list[MedicationRead]:
    medications = await medication_service.get_medications(session, user_id=current_user.id)
    return [MedicationRead.model_validate(obj) for obj in medications]


@router.post(
    "",
    response_model=MedicationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add medication",
)
async def create_medication(
    payload: MedicationCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> MedicationRead:
    medication = await medication_service.add_medication(
        session, payload, user_id=current_user.id, feed=feed
    )
    return MedicationRead.model_validate(medication)


@router.get(
    "/today",
    response_model=list[MedicationWithStatus],
    summary="Medications with today's status",
)
async def list_medications_with_today_status(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> list[MedicationWithStatus]:
    today = localize(None, get_settings().app_timezone).date()
    return await medication_service.get_medications_with_today_status(
        session, user_id=current_user.id, tracking_date=today
    )


@router.get("/{medication_id}", response_model=MedicationRead, summary="Read medication")
async def read_medication(
    medication_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> MedicationRead:
    medication = await _get_owned_medication(session, current_user, medication_id)
    return MedicationRead.model_validate(medication)


@router.patch("/{medication_id}", response_model=MedicationRead, summary="Update medication")
async def update_medication(
    medication_id: uuid.UUID,
    payload: MedicationUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> MedicationRead:
    medication = await _get_owned_medication(session, current_user, medication_id)
    try:
        updated = await medication_service.update_medication(
            session, medication=medication, payload=payload, feed=feed
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MedicationRead.model_validate(updated)


@router.delete(
    "/{medication_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete medication",
)
async def delete_medication(
    medication_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> None:
    medication = await _get_owned_medication(session, current_user, medication_id)
    await medication_service.delete_medication(session, medication=medication, feed=feed)
