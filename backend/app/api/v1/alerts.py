"""In-app alert endpoints."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.models.user import User
from app.schemas.alert import AlertCreate, AlertRead, MarkAllReadResponse
from app.services import alert_service
from app.services.change_feed import ChangeFeed

router = APIRouter(prefix="/alerts")


@router.get("", response_model=list[AlertRead], summary="Recent alerts")
async def list_alerts(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    limit: Annotated[int, Query(ge=1, le=200)] = 20,
) -> list[AlertRead]:
    alerts = await alert_service.get_alerts(session, user_id=current_user.id, limit=limit)
    return [AlertRead.model_validate(obj) for obj in alerts]


@router.post(
    "",
    response_model=AlertRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create alert",
)
async def create_alert(
    payload: AlertCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> AlertRead:
    alert = await alert_service.create_alert(
        session,
        user_id=current_user.id,
        message=payload.message,
        severity=payload.severity,
        feed=feed,
    )
    return AlertRead.model_validate(alert)


@router.post("/read-all", response_model=MarkAllReadResponse, summary="Mark all alerts read")
async def mark_all_read(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> MarkAllReadResponse:
    updated = await alert_service.mark_all_alerts_as_read(
        session, user_id=current_user.id, feed=feed
    )
    return MarkAllReadResponse(updated=updated)


@router.post("/{alert_id}/read", response_model=AlertRead, summary="Mark alert read")
async def mark_read(
    alert_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    feed: Annotated[ChangeFeed, Depends(deps.get_change_feed)],
) -> AlertRead:
    try:
        alert = await alert_service.mark_alert_as_read(
            session, alert_id=alert_id, user_id=current_user.id, feed=feed
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return AlertRead.model_validate(alert)
