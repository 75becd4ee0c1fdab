"""Notification self-test."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status

from app.api import deps
from app.models.user import Profile
from app.schemas.alert import EmailTestRequest, EmailTestResponse
from app.services import email_service

router = APIRouter(prefix="/notifications")


@router.post("/test-email", response_model=EmailTestResponse, summary="Send a test email")
async def send_test_email(
    profile: Annotated[Profile, Depends(deps.get_current_profile)],
    payload: Annotated[EmailTestRequest | None, Body()] = None,
) -> EmailTestResponse:
    """Send to the given address, else the caretaker, else the account email."""
    target = (payload.email if payload else None) or profile.caretaker_email or profile.email
    if not target:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No email address to send to"
        )
    sent = await email_service.send_test_email(target)
    return EmailTestResponse(sent=sent)
