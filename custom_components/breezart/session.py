"""Connection session for a single Breezart device.

This module tracks the lifecycle of the link to one device as an explicit
state machine driven by the client's connect/disconnect notifications, and
owns the reconnect policy.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from .client import BreezartConnectionError, BreezartError, BreezartProtocolError
from .const import (
    DEFAULT_RECONNECT_BACKOFF,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_RECONNECT_MAX_DELAY,
)
from .models import ConnectionState

if TYPE_CHECKING:
    from collections.abc import Callable

    from .client import BreezartClient

_LOGGER = logging.getLogger(__name__)


class BreezartSession:
    """Owner of the device client and its connection lifecycle.

    Every disconnect schedules a single reconnect attempt after
    ``reconnect_delay`` seconds unless one is already pending. Retries are
    unbounded unless ``reconnect_max_attempts`` is set; a ``reconnect_backoff``
    above 1.0 grows the delay per failed attempt up to ``reconnect_max_delay``.

    Callbacks:
    - connection: called with True on connect and False on disconnect
    - error: called with a BreezartProtocolError for device error events
    """

    def __init__(  # noqa: PLR0913
        self,
        client: BreezartClient,
        name: str,
        *,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        reconnect_backoff: float = DEFAULT_RECONNECT_BACKOFF,
        reconnect_max_delay: float = DEFAULT_RECONNECT_MAX_DELAY,
        reconnect_max_attempts: int | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            client: Device client, exclusively owned by this session.
            name: Device name used in log messages.
            reconnect_delay: Seconds to wait before the first reconnect.
            reconnect_backoff: Delay multiplier applied per failed attempt.
            reconnect_max_delay: Upper bound for the reconnect delay.
            reconnect_max_attempts: Give up after this many failed attempts.

        """
        self._client = client
        self._name = name
        self._reconnect_delay = reconnect_delay
        self._reconnect_backoff = reconnect_backoff
        self._reconnect_max_delay = reconnect_max_delay
        self._reconnect_max_attempts = reconnect_max_attempts

        self._state = ConnectionState.DISCONNECTED
        self._reconnect_task: asyncio.Task[None] | None = None
        self._attempts = 0
        self._shutdown = False
        self._client_unsubs: list[Callable[[], None]] = []

        self._connection_callbacks: list[Callable[[bool], None]] = []
        self._error_callbacks: list[Callable[[BreezartError], None]] = []

    @property
    def client(self) -> BreezartClient:
        """Return the device client owned by this session."""
        return self._client

    @property
    def state(self) -> ConnectionState:
        """Return the current connection state."""
        return self._state

    @property
    def connected(self) -> bool:
        """Return True if the session is connected."""
        return self._state is ConnectionState.CONNECTED

    @property
    def reconnect_pending(self) -> bool:
        """Return True if a reconnect attempt is scheduled."""
        return self._reconnect_task is not None and not self._reconnect_task.done()

    def register_connection_callback(
        self,
        callback: Callable[[bool], None],
    ) -> Callable[[], None]:
        """Register a callback for connect/disconnect notifications.

        Returns:
            A function to unregister the callback.

        """
        self._connection_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._connection_callbacks:
                self._connection_callbacks.remove(callback)

        return unregister

    def register_error_callback(
        self,
        callback: Callable[[BreezartError], None],
    ) -> Callable[[], None]:
        """Register a callback for device error notifications.

        Returns:
            A function to unregister the callback.

        """
        self._error_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._error_callbacks:
                self._error_callbacks.remove(callback)

        return unregister

    async def async_start(self) -> None:
        """Subscribe to client notifications and make the first attempt."""
        self._shutdown = False
        if not self._client_unsubs:
            self._client_unsubs = [
                self._client.register_connection_callback(
                    self._handle_connection_event
                ),
                self._client.register_error_callback(self._handle_error_event),
            ]
        await self.async_connect()

    async def async_connect(self) -> bool:
        """Attempt to connect to the device.

        Returns:
            True if the session is connected afterwards, False otherwise.

        """
        if self._state is not ConnectionState.DISCONNECTED:
            _LOGGER.debug("%s: connect skipped, session is %s", self._name, self._state)
            return self.connected

        self._state = ConnectionState.CONNECTING
        _LOGGER.debug("%s: connecting", self._name)

        try:
            await self._client.async_connect()
        except asyncio.CancelledError:
            self._state = ConnectionState.DISCONNECTED
            raise
        except (BreezartError, OSError, TimeoutError) as err:
            error = BreezartConnectionError(f"Connection to {self._name} failed: {err}")
            _LOGGER.warning("%s", error)
            self._handle_disconnect()
            return False

        if self._shutdown:
            if self._state is ConnectionState.CONNECTING:
                self._state = ConnectionState.DISCONNECTED
            _LOGGER.debug("%s: session stopped during connect", self._name)
            return self.connected

        # Clients may report the connect through the callback before returning
        if self._state is ConnectionState.CONNECTING:
            if self._client.connected:
                self._handle_connect()
            else:
                self._handle_disconnect()
        return self.connected

    def _handle_connection_event(self, connected: bool) -> None:  # noqa: FBT001
        """Process a connect/disconnect notification from the client."""
        if connected:
            self._handle_connect()
        else:
            self._handle_disconnect()

    def _handle_error_event(self, err: Exception) -> None:
        """Forward a device error without touching the connection state."""
        error = (
            err
            if isinstance(err, BreezartProtocolError)
            else BreezartProtocolError(str(err))
        )
        _LOGGER.error("%s: device error: %s", self._name, error)
        for callback in list(self._error_callbacks):
            try:
                callback(error)
            except Exception:
                _LOGGER.exception("Error in error callback")

    def _handle_connect(self) -> None:
        if self._state is ConnectionState.CONNECTED:
            return
        self._state = ConnectionState.CONNECTED
        self._attempts = 0
        _LOGGER.info("%s: connection established", self._name)
        self._notify_connection(connected=True)

    def _handle_disconnect(self) -> None:
        previous = self._state
        self._state = ConnectionState.DISCONNECTED
        if previous is ConnectionState.CONNECTED:
            _LOGGER.warning("%s: device disconnected", self._name)
        if previous is not ConnectionState.DISCONNECTED:
            self._notify_connection(connected=False)
        if not self._shutdown:
            self._schedule_reconnect()

    def _notify_connection(self, *, connected: bool) -> None:
        for callback in list(self._connection_callbacks):
            try:
                callback(connected)
            except Exception:
                _LOGGER.exception("Error in connection callback")

    def _next_delay(self) -> float:
        delay = self._reconnect_delay * self._reconnect_backoff ** max(
            0, self._attempts - 1
        )
        return min(delay, self._reconnect_max_delay)

    def _schedule_reconnect(self) -> None:
        """Schedule a reconnection attempt."""
        task = self._reconnect_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            return  # Reconnection already scheduled

        if (
            self._reconnect_max_attempts is not None
            and self._attempts >= self._reconnect_max_attempts
        ):
            _LOGGER.error(
                "%s: giving up after %d reconnect attempts",
                self._name,
                self._attempts,
            )
            return

        self._attempts += 1
        delay = self._next_delay()
        _LOGGER.debug(
            "%s: reconnect attempt %d in %.1fs", self._name, self._attempts, delay
        )

        async def reconnect() -> None:
            try:
                await asyncio.sleep(delay)
                if not self._shutdown:
                    _LOGGER.info("%s: attempting to reconnect", self._name)
                    await self.async_connect()
            finally:
                # A failed attempt may already have scheduled the next one
                if self._reconnect_task is asyncio.current_task():
                    self._reconnect_task = None

        self._reconnect_task = asyncio.create_task(reconnect())

    async def async_stop(self) -> None:
        """Cancel a pending reconnect and stop listening to the client.

        The client's own connection is left as it is.
        """
        self._shutdown = True

        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconnect_task
            self._reconnect_task = None

        for unsub in self._client_unsubs:
            unsub()
        self._client_unsubs = []
        _LOGGER.info("%s: session stopped", self._name)
