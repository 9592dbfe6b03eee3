"""Device client contract for Breezart ventilation units.

The wire protocol lives in an external client library. This module defines
the surface the integration consumes from such a client together with the
error taxonomy used across the integration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable


class BreezartError(Exception):
    """Base exception for Breezart device errors."""


class BreezartConnectionError(BreezartError):
    """Exception raised when a connection attempt fails."""


class BreezartPollError(BreezartError):
    """Exception raised when a status pull fails while connected."""


class BreezartCommandError(BreezartError):
    """Exception raised when a command is rejected or cannot be forwarded."""


class BreezartProtocolError(BreezartError):
    """Exception raised for malformed or unsolicited device error replies."""


class BreezartClient(Protocol):
    """Register-oriented connection to a single Breezart device.

    Register attributes are refreshed by :meth:`async_pull_status`. Connection
    changes and device errors are pushed through the registered callbacks:
    the connection callback receives ``True`` on connect and ``False`` on
    disconnect.
    """

    connected: bool

    power_on: bool
    speed_target: int
    temperature_target: int
    mode_set: int
    mode_state: int
    supply_temperature: float | None
    filter_change: int
    filter_dust: int | None
    power_consumption: float | None

    firmware_version: int | None
    protocol_version: int | None
    speed_min: int | None
    speed_max: int | None
    temperature_min: int | None
    temperature_max: int | None

    def register_connection_callback(
        self,
        callback: Callable[[bool], None],
    ) -> Callable[[], None]: ...

    def register_error_callback(
        self,
        callback: Callable[[Exception], None],
    ) -> Callable[[], None]: ...

    async def async_connect(self) -> None: ...

    async def async_pull_status(self) -> None: ...

    async def async_set_power(self, power_on: bool) -> None: ...  # noqa: FBT001

    async def async_set_speed(self, speed: int) -> None: ...

    async def async_set_mode(self, mode: int) -> None: ...

    async def async_set_temperature(self, temperature: int) -> None: ...
