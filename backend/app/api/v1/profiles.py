"""Profile endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.models.user import Profile
from app.schemas.profile import ProfileRead, ProfileUpdate
from app.services import profile_service

router = APIRouter(prefix="/profiles")


@router.get("/me", response_model=ProfileRead, summary="Read own profile")
async def read_profile(
    profile: Annotated[Profile, Depends(deps.get_current_profile)],
) -> ProfileRead:
    return ProfileRead.model_validate(profile)


@router.patch("/me", response_model=ProfileRead, summary="Update own profile")
async def update_profile(
    payload: ProfileUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    profile: Annotated[Profile, Depends(deps.get_current_profile)],
) -> ProfileRead:
    try:
        updated = await profile_service.update_profile(
            session, profile=profile, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ProfileRead.model_validate(updated)
