"""In-process change feed for pushing row changes to connected clients.

Writers publish after their transaction commits; subscribers receive events
for one table filtered to one user. There is no replay: a subscriber only
sees events published while it is registered.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)

TABLES = frozenset({"medications", "medication_tracking", "alerts"})
_DEFAULT_QUEUE_SIZE = 100


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    user_id: UUID
    record: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def as_message(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "eventType": self.event_type,
            "new": self.record,
            "occurred_at": self.occurred_at.isoformat(),
        }


class Subscription:
    """A bounded queue of events for one (table, user) pair."""

    def __init__(
        self, feed: ChangeFeed, table: str, user_id: UUID, maxsize: int
    ) -> None:
        self._feed = feed
        self.table = table
        self.user_id = user_id
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, event: ChangeEvent) -> None:
        if self._queue.full():
            # oldest event is discarded so the latest state still arrives
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(event)

    async def get(self) -> ChangeEvent:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._feed._remove(self)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self.get()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class ChangeFeed:
    def __init__(self, *, queue_size: int = _DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[tuple[str, UUID], list[Subscription]] = defaultdict(list)

    def subscribe(self, table: str, user_id: UUID) -> Subscription:
        if table not in TABLES:
            raise ValueError(f"Unknown table {table!r}")
        subscription = Subscription(self, table, user_id, self._queue_size)
        self._subscribers[(table, user_id)].append(subscription)
        return subscription

    def publish(
        self,
        table: str,
        event_type: str,
        *,
        user_id: UUID,
        record: dict[str, Any],
    ) -> int:
        """Deliver an event to matching subscribers; returns how many received it."""
        event = ChangeEvent(
            table=table, event_type=event_type, user_id=user_id, record=record
        )
        targets = list(self._subscribers.get((table, user_id), ()))
        for subscription in targets:
            subscription.offer(event)
        logger.debug(
            "Published %s on %s to %d subscriber(s)", event_type, table, len(targets)
        )
        return len(targets)

    def subscriber_count(self, table: str | None = None) -> int:
        return sum(
            len(subs)
            for (sub_table, _), subs in self._subscribers.items()
            if table is None or sub_table == table
        )

    def _remove(self, subscription: Subscription) -> None:
        key = (subscription.table, subscription.user_id)
        subs = self._subscribers.get(key)
        if not subs:
            return
        if subscription in subs:
            subs.remove(subscription)
        if not subs:
            del self._subscribers[key]


default_feed = ChangeFeed()


__all__ = ["ChangeEvent", "ChangeFeed", "Subscription", "TABLES", "default_feed"]
