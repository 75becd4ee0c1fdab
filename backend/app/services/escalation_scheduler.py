"""Periodic runner for the missed-dose escalation check."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class EscalationScheduler:
    """Owns the background task that runs ``runner`` on a fixed interval.

    The first run happens ``initial_delay`` seconds after :meth:`start`, then
    every ``interval`` seconds. A failing run is logged and the loop keeps
    going. Runs never overlap: the next wait starts after a run finishes.
    """

    def __init__(
        self,
        runner: Callable[[], Awaitable[Any]],
        *,
        interval: float = 300.0,
        initial_delay: float = 5.0,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._runner = runner
        self.interval = interval
        self.initial_delay = max(initial_delay, 0.0)
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop. Does nothing if it is already running."""
        if self.running:
            logger.warning("Escalation scheduler already running")
            return
        self._task = asyncio.create_task(self._loop(), name="escalation-scheduler")
        logger.info(
            "Escalation scheduler started (every %.0fs)", self.interval
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Escalation scheduler stopped")

    async def run_once(self) -> None:
        self.runs += 1
        try:
            await self._runner()
        except Exception:
            logger.exception("Escalation run failed")

    async def _loop(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)
