"""WebSocket stream of row changes for the authenticated user."""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from app.api.deps import get_change_feed, load_active_user
from app.db.session import get_sessionmaker
from app.services.change_feed import TABLES, Subscription

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime")


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    async for event in subscription:
        await websocket.send_json(event.as_message())


async def _drain(websocket: WebSocket) -> None:
    # client messages are ignored; this only notices the disconnect
    while True:
        await websocket.receive_text()


@router.websocket("/{table}")
async def stream_changes(
    websocket: WebSocket,
    table: str,
    token: str = Query(default=""),
) -> None:
    if table not in TABLES:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown table")
        return
    async with get_sessionmaker()() as session:
        user = await load_active_user(session, token) if token else None
        user_id = user.id if user is not None else None
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Not authenticated")
        return

    feed = get_change_feed(websocket)
    await websocket.accept()
    logger.info("Realtime subscriber for %s connected (user %s)", table, user_id)
    async with feed.subscribe(table, user_id) as subscription:
        tasks = {
            asyncio.create_task(_forward(websocket, subscription)),
            asyncio.create_task(_drain(websocket)),
        }
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            for task in done:
                exc = task.exception()
                if exc is not None and not isinstance(exc, WebSocketDisconnect):
                    logger.error("Realtime stream for %s failed: %s", table, exc)
        finally:
            for task in tasks:
                task.cancel()
    logger.info("Realtime subscriber for %s disconnected (user %s)", table, user_id)
