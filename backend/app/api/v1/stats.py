"""Dashboard statistics."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.config import get_settings
from app.models.user import User
from app.schemas.alert import MedicationStats
from app.services import stats_service
from app.services.dose_schedule import localize

router = APIRouter(prefix="/stats")


@router.get("", response_model=MedicationStats, summary="Medication statistics")
async def medication_stats(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> MedicationStats:
    today = localize(None, get_settings().app_timezone).date()
    return await stats_service.get_medication_stats(
        session, user_id=current_user.id, today=today
    )
