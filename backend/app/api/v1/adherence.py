"""Missed-dose checks triggered from the dashboards."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api import deps
from app.models.user import User
from app.schemas.alert import EscalationRunResponse, MissedCheckResponse
from app.services import escalation_service
from app.services.change_feed import ChangeFeed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/adherence")


@router.post("/check", response_model=MissedCheckResponse, summary="Check missed doses")
async def check_missed(
    factory: Annotated[async_sessionmaker[AsyncSession], Depends(deps.get_db_sessionmaker)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> MissedCheckResponse:
    """List the caller's overdue doses and run an escalation pass."""
    missed = await escalation_service.check_missed_medications(
        factory, user_id=current_user.id, feed=feed
    )
    return MissedCheckResponse(missed=missed)


@router.post(
    "/escalate",
    response_model=EscalationRunResponse,
    summary="Run one escalation pass",
)
async def run_escalation(
    factory: Annotated[async_sessionmaker[AsyncSession], Depends(deps.get_db_sessionmaker)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> EscalationRunResponse:
    logger.info("Escalation pass requested by user %s", current_user.id)
    summary = await escalation_service.check_and_send_missed_medication_emails(
        factory, feed=feed
    )
    return EscalationRunResponse(
        slots_evaluated=summary.slots_evaluated,
        emails_attempted=summary.emails_attempted,
        failures=summary.failures,
    )
