"""Authentication service helpers."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import Profile, User
from app.schemas.auth import RegistrationRequest


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def register(
    session: AsyncSession, payload: RegistrationRequest
) -> tuple[User, Profile]:
    """Create a login and its profile in one transaction."""
    email = payload.email.lower()
    if await get_user_by_email(session, email) is not None:
        raise ValueError("Email already registered")

    user = User(email=email, hashed_password=get_password_hash(payload.password))
    session.add(user)
    await session.flush()
    profile = Profile(
        id=user.id,
        email=email,
        full_name=payload.full_name,
        role=payload.role,
    )
    session.add(profile)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ValueError("Email already registered") from exc
    await session.refresh(profile)
    return user, profile


async def authenticate_user(
    session: AsyncSession, email: str, password: str
) -> User | None:
    """Validate credentials and return a user if correct."""
    user = await get_user_by_email(session, email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def create_access_token_for_user(user: User) -> str:
    return create_access_token(str(user.id))
