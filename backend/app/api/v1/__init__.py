"""Versioned API router."""

from fastapi import APIRouter

from . import (
    adherence,
    alerts,
    auth,
    health,
    medication,
    notifications,
    profiles,
    realtime,
    stats,
    tracking,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profiles.router, tags=["profiles"])
router.include_router(medication.router, tags=["medications"])
router.include_router(tracking.router, tags=["tracking"])
router.include_router(alerts.router, tags=["alerts"])
router.include_router(stats.router, tags=["stats"])
router.include_router(adherence.router, tags=["adherence"])
router.include_router(notifications.router, tags=["notifications"])
router.include_router(realtime.router, tags=["realtime"])

__all__ = ["router"]
