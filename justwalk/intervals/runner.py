"""Timer loop for a walk session.

One asyncio task ticks the controller once per tick interval. When the loop
wakes up late (event loop blocked, process suspended) the measured gap is
handed to the controller as a catch-up instead of being silently lost.
Session time follows the monotonic clock: only whole ticks are consumed and
the remainder of a late wake-up is kept for the next one.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable

from loguru import logger

from justwalk.intervals.session import FINISHED_STATUSES, IntervalWalkSession, SessionStatus, SessionSummary, TickResult

TickCallback = Callable[[TickResult], None]


class SessionRunner:
    """Drives an IntervalWalkSession from a fixed-interval asyncio timer.

    Each timer firing counts as one second of session time, so a shorter
    tick_interval plays a session back faster (used by the CLI simulator).
    """

    def __init__(
        self,
        session: IntervalWalkSession,
        tick_interval: float | None = None,
        on_tick: TickCallback | None = None,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.tick_interval = tick_interval or session.settings.tick_interval_seconds
        self.on_tick = on_tick
        self._monotonic = monotonic
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Start the session (if needed) and schedule the timer task."""
        if self.running:
            raise RuntimeError("Session runner already started")
        if self.session.status == SessionStatus.READY:
            self.session.start()
        self._task = asyncio.create_task(self.run())
        return self._task

    async def run(self) -> None:
        if self.session.status == SessionStatus.READY:
            self.session.start()

        last = self._monotonic()
        while self.session.status not in FINISHED_STATUSES:
            await self._sleep(self.tick_interval)
            now = self._monotonic()
            if self.session.status == SessionStatus.PAUSED:
                last = now
                continue

            # Whole ticks only; the leftover fraction carries into the next wake-up.
            elapsed_ticks = int((now - last) // self.tick_interval)
            if elapsed_ticks < 1:
                continue
            last += elapsed_ticks * self.tick_interval

            if elapsed_ticks == 1:
                result = self.session.tick()
            else:
                logger.warning(f"Timer fell behind by {elapsed_ticks} ticks, catching up")
                result = self.session.catch_up(elapsed_ticks)

            if self.on_tick is not None:
                self.on_tick(result)

    async def wait(self) -> SessionSummary | None:
        """Wait for natural completion."""
        if self._task is not None:
            await self._task
        return self.session.summary

    async def stop(self) -> SessionSummary:
        """Cancel the timer, then stop the session.

        The timer is cancelled before the session snapshots its counters, so
        no tick can land after the summary is built.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        return self.session.stop()
