"""Recurring keepalive timer.

The exchange drops connections that stay silent, so the session sends an
application ping on a fixed schedule. The timer only measures time; sending
is left to the message pump so pings interleave with message handling on a
single task.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

DEFAULT_PING_INTERVAL = 15.0


class Keepalive:
    """Fixed-rate tick source.

    The first tick is due one interval after construction. Ticks missed while
    nobody was waiting collapse into one; the schedule then resumes on the
    original grid.
    """

    def __init__(
        self,
        interval: float = DEFAULT_PING_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("Keepalive interval must be positive")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._deadline = clock() + interval
        self.ticks = 0

    @property
    def deadline(self) -> float:
        """Clock reading at which the next tick is due."""
        return self._deadline

    def remaining(self) -> float:
        return max(0.0, self._deadline - self._clock())

    async def tick(self) -> None:
        """Sleep until the next tick is due, then advance the schedule."""
        await self._sleep(self.remaining())
        now = self._clock()
        self._deadline += self.interval
        if self._deadline <= now:
            missed = int((now - self._deadline) // self.interval) + 1
            self._deadline += missed * self.interval
        self.ticks += 1
