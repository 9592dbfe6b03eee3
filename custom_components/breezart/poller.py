"""Fixed-interval status polling for Breezart devices."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from .const import DEFAULT_POLL_INTERVAL

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .session import BreezartSession

_LOGGER = logging.getLogger(__name__)


class BreezartPollLoop:
    """Drive a status refresh on a fixed cadence while the session is connected.

    Ticks never overlap: a tick that runs past its slot makes the loop skip
    the missed slots and realign to the cadence instead of queueing them.
    The tick receives the seconds its slot covers, skipped slots included.
    """

    def __init__(
        self,
        session: BreezartSession,
        tick: Callable[[float], Awaitable[object]],
        interval: float = DEFAULT_POLL_INTERVAL,
        name: str = "breezart",
    ) -> None:
        self._session = session
        self._tick = tick
        self._interval = interval
        self._name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        """Return the poll period in seconds."""
        return self._interval

    @property
    def running(self) -> bool:
        """Return True while the poll task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the poll task if it is not running yet."""
        if self.running:
            return
        _LOGGER.debug("%s: polling every %.1fs", self._name, self._interval)
        self._task = asyncio.create_task(self._async_run())

    async def _async_run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        elapsed = self._interval

        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

            if self._session.connected:
                try:
                    await self._tick(elapsed)
                except Exception:
                    _LOGGER.exception("%s: error during poll tick", self._name)

            next_tick += self._interval
            elapsed = self._interval
            now = loop.time()
            if next_tick <= now:
                skipped = int((now - next_tick) // self._interval) + 1
                next_tick += skipped * self._interval
                elapsed += skipped * self._interval
                _LOGGER.debug(
                    "%s: poll tick overran, skipping %d slot(s)", self._name, skipped
                )

    async def async_stop(self) -> None:
        """Cancel the poll task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
