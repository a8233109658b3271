import asyncio
from datetime import datetime
from typing import Awaitable, Callable

import httpx
import structlog

from ..domain.clock import seconds_until_midnight, utcnow

logger = structlog.get_logger()

POLL_INTERVAL_S = 60.0


class CheckInScheduler:
    """Decides when the viewer asks for today's check-in status.

    Owned by one open viewer: ``start()`` queries once and arms a polling task
    plus a midnight timer, ``stop()`` cancels both. The poll is a local date
    comparison; only a date change or the midnight timer reaches the network.

    "Today" and "midnight" are both read from ``clock``, so they agree with
    each other. The default UTC clock also agrees with the server's day key.
    """

    def __init__(self,
                 fetch_status: Callable[[], Awaitable[bool]],
                 on_prompt: Callable[[], None],
                 *,
                 clock: Callable[[], datetime] = utcnow,
                 poll_interval: float = POLL_INTERVAL_S):
        self.fetch_status = fetch_status
        self.on_prompt = on_prompt
        self.clock = clock
        self.poll_interval = poll_interval
        self.last_checked_date: str | None = None
        self.has_checked_in_today = False
        self._tasks: list[asyncio.Task] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def today(self) -> str:
        return self.clock().date().isoformat()

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        await self.refresh()
        if not self._running:
            return
        self._tasks = [
            asyncio.create_task(self._poll_loop()),
            asyncio.create_task(self._midnight_loop()),
        ]

    async def stop(self) -> None:
        self._running = False
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> "CheckInScheduler":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()

    async def on_tick(self) -> None:
        if not self._running:
            return
        if self.last_checked_date and self.last_checked_date != self.today():
            await self.refresh()

    async def on_midnight(self) -> None:
        if not self._running:
            return
        # a tick may already have picked up the new day
        if self.last_checked_date == self.today():
            return
        await self.refresh()

    def mark_checked_in(self) -> None:
        self.has_checked_in_today = True
        self.last_checked_date = self.today()

    async def refresh(self) -> None:
        today = self.today()
        try:
            checked_in = await self.fetch_status()
        except httpx.HTTPError as e:
            logger.warning("check_in_status_failed", error=str(e))
            self.has_checked_in_today = False
            return
        if not self._running:
            return
        self.has_checked_in_today = checked_in
        self.last_checked_date = today
        if not checked_in:
            self.on_prompt()

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            await self.on_tick()

    async def _midnight_loop(self) -> None:
        while True:
            await asyncio.sleep(seconds_until_midnight(self.clock()))
            await self.on_midnight()
