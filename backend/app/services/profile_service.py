"""Profile data access helpers."""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Profile
from app.schemas.profile import ProfileUpdate


async def get_profile(session: AsyncSession, *, user_id: uuid.UUID) -> Profile | None:
    return await session.get(Profile, user_id)


async def update_profile(
    session: AsyncSession, *, profile: Profile, payload: ProfileUpdate
) -> Profile:
    """Apply the fields present in ``payload`` to ``profile``."""
    updates = payload.model_dump(exclude_unset=True)
    if "full_name" in updates and not updates["full_name"]:
        raise ValueError("Full name cannot be empty")
    if "email_notifications" in updates and updates["email_notifications"] is None:
        raise ValueError("email_notifications must be true or false")
    if "role" in updates and updates["role"] is None:
        raise ValueError("role cannot be empty")
    for field, value in updates.items():
        setattr(profile, field, value)
    await session.commit()
    await session.refresh(profile)
    return profile
