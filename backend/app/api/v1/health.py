"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_change_feed
from app.core.config import get_settings
from app.services.change_feed import ChangeFeed

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    feed: Annotated[ChangeFeed, Depends(get_change_feed)],
) -> dict[str, object]:
    """Report service metadata, database reachability and live subscribers.

    A failing database probe surfaces as the 503 handled in ``app.main``.
    """
    settings = get_settings()
    await session.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "service": settings.app_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.app_env,
        "database": "ok",
        "realtime_subscribers": feed.subscriber_count(),
    }
