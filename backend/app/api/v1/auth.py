"""Authentication endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_profile, get_db_session
from app.core.config import get_settings
from app.models.user import Profile
from app.schemas.auth import RegistrationRequest, RegistrationResponse, Token
from app.schemas.profile import ProfileRead
from app.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()

_settings = get_settings()

_WINDOW_SECONDS = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def _parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"10/minute"`` into ``(times, seconds)``."""
    count_str, _, window_str = value.partition("/")
    try:
        count = int(count_str.strip())
    except ValueError:
        return fallback
    return count, _WINDOW_SECONDS.get(window_str.strip().lower(), fallback[1])


def _rate_dependency(limit: tuple[int, int]):
    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


_LOGIN_RATE_DEP = _rate_dependency(
    _parse_rate(_settings.rate_limit_login, fallback=(10, 60))
)
_DEFAULT_RATE_DEP = _rate_dependency(
    _parse_rate(_settings.rate_limit_default, fallback=(100, 60))
)


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[_LOGIN_RATE_DEP],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> Token:
    """Validate credentials and issue a bearer token."""
    user = await auth_service.authenticate_user(
        session, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=await auth_service.create_access_token_for_user(user))


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def register(
    payload: RegistrationRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> RegistrationResponse:
    try:
        user, profile = await auth_service.register(session, payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    logger.info("Registered user %s", user.id)
    token = Token(access_token=await auth_service.create_access_token_for_user(user))
    return RegistrationResponse(token=token, profile=ProfileRead.model_validate(profile))


@router.get("/me", response_model=ProfileRead, summary="Current user")
async def read_me(
    profile: Annotated[Profile, Depends(get_current_profile)],
) -> ProfileRead:
    return ProfileRead.model_validate(profile)
