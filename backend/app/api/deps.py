"""Common API dependencies."""

from __future__ import annotations

from typing import Annotated
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from starlette.requests import HTTPConnection
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.security import user_id_from_token
from app.db.session import get_session, get_sessionmaker
from app.models.user import Profile, User
from app.services import change_feed as change_feed_module
from app.services import profile_service
from app.services.change_feed import ChangeFeed

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def get_db_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Provide the session factory for work that opens its own sessions."""
    return get_sessionmaker()


def get_change_feed(connection: HTTPConnection) -> ChangeFeed:
    feed = getattr(connection.app.state, "change_feed", None)
    return feed if feed is not None else change_feed_module.default_feed


async def load_active_user(session: AsyncSession, token: str) -> User | None:
    """Resolve a bearer token to an active user, or None."""
    try:
        user_id = user_id_from_token(token)
    except JWTError:
        return None
    user = await session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Authenticate request via bearer token."""
    user = await load_active_user(session, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> Profile:
    """Return the profile of the authenticated user."""
    profile = await profile_service.get_profile(session, user_id=current_user.id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found"
        )
    return profile
