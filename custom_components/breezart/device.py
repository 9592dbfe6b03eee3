"""Synchronized state of a Breezart ventilation unit.

This module provides the aggregate the rest of the integration talks to. It
combines the connection session, the poll loop, the per-field override
window and the energy accumulator behind a small get/set/pull surface.
Errors never escape this boundary: they are returned from the coroutines
or recorded as ``last_error``.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import TYPE_CHECKING, Any

from homeassistant.util import dt as dt_util

from .accumulator import EnergyAccumulator, eve_reset_marker
from .client import (
    BreezartCommandError,
    BreezartConnectionError,
    BreezartError,
    BreezartPollError,
)
from .const import (
    DEBOUNCE_WINDOW,
    DEFAULT_POLL_INTERVAL,
    MAX_SAMPLE_INTERVAL,
    VALID_MODES,
)
from .debounce import OverrideDebounceStore
from .models import (
    BreezartDeviceInfo,
    BreezartDeviceState,
    BreezartStatus,
    DebouncedField,
)
from .poller import BreezartPollLoop
from .session import BreezartSession

if TYPE_CHECKING:
    from collections.abc import Callable

    from .accumulator import EnergyStorage
    from .client import BreezartClient
    from .models import BreezartDeviceConfig

_LOGGER = logging.getLogger(__name__)

STATE_FIELDS = frozenset(
    field.name for field in dataclasses.fields(BreezartDeviceState)
)

# Client writer used to forward each settable field
COMMAND_WRITERS = {
    DebouncedField.ACTIVE: "async_set_power",
    DebouncedField.ROTATION_SPEED: "async_set_speed",
    DebouncedField.MODE: "async_set_mode",
    DebouncedField.HEATING_THRESHOLD_TEMPERATURE: "async_set_temperature",
}


class BreezartDevice:
    """Externally visible state of one device kept in sync with the hardware.

    Local sets are applied optimistically and shielded from poll results for
    the debounce window. Periodic polls refresh everything else and feed the
    energy accumulator.
    """

    def __init__(  # noqa: PLR0913
        self,
        session: BreezartSession,
        energy_storage: EnergyStorage,
        *,
        name: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        debounce_window: float = DEBOUNCE_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the device.

        Args:
            session: Connection session owning the device client.
            energy_storage: Load/save collaborator for the energy total.
            name: Device name used in log messages.
            poll_interval: Seconds between periodic status pulls.
            debounce_window: Seconds a local set wins over poll results.
            clock: Monotonic clock used for the override window.

        """
        self._session = session
        self._name = name
        self._state = BreezartDeviceState()
        self._device_info = BreezartDeviceInfo()
        self._debounce = OverrideDebounceStore(debounce_window, clock)
        self._accumulator = EnergyAccumulator(energy_storage)
        self._poller = BreezartPollLoop(
            session, self._async_poll_tick, poll_interval, name
        )
        self._update_callbacks: list[Callable[[], None]] = []
        self._session_unsubs: list[Callable[[], None]] = []

    @classmethod
    def from_config(
        cls,
        client: BreezartClient,
        energy_storage: EnergyStorage,
        config: BreezartDeviceConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> BreezartDevice:
        """Create a device and its session from a validated configuration."""
        session = BreezartSession(
            client,
            config.name,
            reconnect_delay=config.reconnect_delay,
            reconnect_backoff=config.reconnect_backoff,
            reconnect_max_delay=config.reconnect_max_delay,
            reconnect_max_attempts=config.reconnect_max_attempts,
        )
        return cls(
            session,
            energy_storage,
            name=config.name,
            poll_interval=config.poll_interval,
            debounce_window=config.debounce_window,
            clock=clock,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def session(self) -> BreezartSession:
        return self._session

    @property
    def connected(self) -> bool:
        return self._session.connected

    @property
    def device_info(self) -> BreezartDeviceInfo:
        """Return firmware and range information from the last poll."""
        return self._device_info

    @property
    def active(self) -> bool:
        return self._state.active

    @property
    def rotation_speed(self) -> int:
        return self._state.rotation_speed

    @property
    def current_temperature(self) -> float | None:
        return self._state.current_temperature

    @property
    def mode(self) -> int:
        return self._state.mode

    @property
    def current_heater_cooler_state(self) -> int:
        return self._state.current_heater_cooler_state

    @property
    def heating_threshold_temperature(self) -> int:
        return self._state.heating_threshold_temperature

    @property
    def filter_change(self) -> int:
        return self._state.filter_change

    @property
    def filter_life_level(self) -> int | None:
        return self._state.filter_life_level

    @property
    def current_power(self) -> float | None:
        return self._state.current_power

    @property
    def last_error(self) -> BreezartError | None:
        """Return the error of the most recent pull or device error event."""
        return self._state.last_error

    @property
    def total_energy(self) -> float:
        return self._state.total_energy

    @property
    def reset_marker(self) -> int:
        return self._state.reset_marker

    def get(self, field: str) -> Any:  # noqa: ANN401
        """Return the current in-memory value of ``field``.

        Raises:
            KeyError: If ``field`` is not a state field.

        """
        if field not in STATE_FIELDS:
            raise KeyError(field)
        return getattr(self._state, field)

    def register_update_callback(
        self,
        callback: Callable[[], None],
    ) -> Callable[[], None]:
        """Register a callback invoked whenever the state changes.

        Returns:
            A function to unregister the callback.

        """
        self._update_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._update_callbacks:
                self._update_callbacks.remove(callback)

        return unregister

    def _notify_update(self) -> None:
        for callback in list(self._update_callbacks):
            try:
                callback()
            except Exception:
                _LOGGER.exception("Error in update callback")

    async def async_start(self) -> None:
        """Restore the energy total, connect and start polling."""
        try:
            await self._accumulator.async_restore()
        except Exception:
            _LOGGER.exception("%s: failed to restore energy total", self._name)
        self._sync_energy()

        if not self._session_unsubs:
            self._session_unsubs = [
                self._session.register_error_callback(self._handle_device_error),
                self._session.register_connection_callback(
                    self._handle_connection_change
                ),
            ]
        await self._session.async_start()
        self._poller.start()

    async def async_stop(self) -> None:
        """Stop polling and reconnecting. The client connection is left as is."""
        await self._poller.async_stop()
        await self._session.async_stop()
        for unsub in self._session_unsubs:
            unsub()
        self._session_unsubs = []

    def _handle_device_error(self, error: BreezartError) -> None:
        self._state.last_error = error
        self._notify_update()

    def _handle_connection_change(self, connected: bool) -> None:  # noqa: FBT001
        _LOGGER.debug(
            "%s: %s", self._name, "connected" if connected else "disconnected"
        )
        self._notify_update()

    async def async_set(
        self, field: DebouncedField | str, value: Any  # noqa: ANN401
    ) -> BreezartCommandError | None:
        """Set ``field`` optimistically and forward it to the device.

        The new value is visible immediately and shielded from polls for the
        debounce window. A failed forward is returned to the caller; it does
        not revert the value and does not touch ``last_error``.

        Returns:
            None on success, otherwise the command error.

        """
        try:
            field = DebouncedField(field)
        except ValueError:
            return BreezartCommandError(f"{field} cannot be set on {self._name}")

        try:
            value = self._coerce_command_value(field, value)
        except (TypeError, ValueError, OverflowError) as err:
            return BreezartCommandError(f"Invalid {field} for {self._name}: {err}")

        setattr(self._state, field, value)
        self._debounce.record_set(field)
        _LOGGER.debug("%s: set %s -> %s", self._name, field, value)
        self._notify_update()

        if not self._session.connected:
            return BreezartCommandError(
                f"Cannot send {field} to {self._name}: not connected"
            )

        writer = getattr(self._session.client, COMMAND_WRITERS[field])
        try:
            await writer(value)
        except (BreezartError, OSError, TimeoutError) as err:
            _LOGGER.warning("%s: failed to send %s: %s", self._name, field, err)
            error = BreezartCommandError(f"Failed to send {field}: {err}")
            error.__cause__ = err
            return error
        except Exception as err:
            _LOGGER.exception(
                "%s: unexpected error while sending %s", self._name, field
            )
            error = BreezartCommandError(f"Failed to send {field}: {err}")
            error.__cause__ = err
            return error
        return None

    async def async_set_active(
        self, active: bool  # noqa: FBT001
    ) -> BreezartCommandError | None:
        return await self.async_set(DebouncedField.ACTIVE, active)

    async def async_set_rotation_speed(
        self, speed: int
    ) -> BreezartCommandError | None:
        return await self.async_set(DebouncedField.ROTATION_SPEED, speed)

    async def async_set_mode(self, mode: int) -> BreezartCommandError | None:
        return await self.async_set(DebouncedField.MODE, mode)

    async def async_set_heating_threshold_temperature(
        self, temperature: float
    ) -> BreezartCommandError | None:
        return await self.async_set(
            DebouncedField.HEATING_THRESHOLD_TEMPERATURE, temperature
        )

    def _coerce_command_value(self, field: DebouncedField, value: Any) -> Any:  # noqa: ANN401
        if field is DebouncedField.ACTIVE:
            return bool(value)

        if field is DebouncedField.MODE:
            mode = int(value)
            if mode not in VALID_MODES:
                msg = f"mode {mode} is not one of {VALID_MODES}"
                raise ValueError(msg)
            return mode

        if field is DebouncedField.ROTATION_SPEED:
            low, high = self._device_info.speed_min, self._device_info.speed_max
            number = int(value)
        else:
            low = self._device_info.temperature_min
            high = self._device_info.temperature_max
            number = round(float(value))

        if (low is not None and number < low) or (high is not None and number > high):
            msg = f"{number} is outside {low}..{high}"
            raise ValueError(msg)
        return number

    async def async_pull(self) -> BreezartError | None:
        """Run one poll cycle out of band.

        Fields and ``last_error`` are updated exactly as for a periodic tick,
        but the energy total is left alone so samples are not counted twice.

        Returns:
            None on success, otherwise the error of this pull.

        """
        if not self._session.connected:
            return BreezartConnectionError(f"{self._name} is not connected")
        status, error = await self._async_refresh()
        self._notify_update()
        return error if status is None else None

    async def _async_poll_tick(self, elapsed: float | None = None) -> None:
        status, _ = await self._async_refresh()
        if status is not None:
            if elapsed is None:
                elapsed = self._poller.interval
            try:
                await self._accumulator.async_add_sample(
                    status.power_consumption, min(elapsed, MAX_SAMPLE_INTERVAL)
                )
            except Exception:
                _LOGGER.exception("%s: failed to persist energy total", self._name)
            self._sync_energy()
        self._notify_update()

    async def _async_refresh(
        self,
    ) -> tuple[BreezartStatus | None, BreezartError | None]:
        client = self._session.client
        try:
            await client.async_pull_status()
            status = BreezartStatus.from_client(client)
        except (BreezartError, OSError, TimeoutError, TypeError, ValueError) as err:
            return None, self._record_poll_error(err)
        except Exception as err:
            _LOGGER.exception("%s: unexpected error during status pull", self._name)
            return None, self._record_poll_error(err)

        # Reset error, the status was received
        self._state.last_error = None
        self._device_info = BreezartDeviceInfo.from_client(client)
        self.apply_status(status)
        return status, None

    def _record_poll_error(self, err: Exception) -> BreezartPollError:
        error = BreezartPollError(f"Status pull from {self._name} failed: {err}")
        error.__cause__ = err
        if self._state.last_error is None:
            _LOGGER.warning("%s", error)
        else:
            _LOGGER.debug("%s", error)
        self._state.last_error = error
        return error

    def apply_status(self, status: BreezartStatus) -> None:
        """Apply a poll snapshot, keeping fields inside their override window."""
        self._apply_debounced(DebouncedField.ACTIVE, status.power_on)
        self._apply_debounced(DebouncedField.ROTATION_SPEED, status.speed_target)
        self._apply_debounced(
            DebouncedField.HEATING_THRESHOLD_TEMPERATURE, status.temperature_target
        )
        self._apply_debounced(DebouncedField.MODE, status.mode_set)

        self._state.current_temperature = status.supply_temperature
        self._state.current_heater_cooler_state = status.mode_state
        self._state.filter_change = status.filter_change
        self._state.filter_life_level = status.filter_life_level
        self._state.current_power = status.power_consumption

    def _apply_debounced(self, field: DebouncedField, value: Any) -> None:  # noqa: ANN401
        if self._debounce.may_apply_poll(field):
            setattr(self._state, field, value)
            return
        _LOGGER.debug(
            "%s: keeping local %s=%s for %.1fs (device reports %s)",
            self._name,
            field,
            getattr(self._state, field),
            self._debounce.remaining(field),
            value,
        )

    async def async_reset_energy(
        self, marker: int | None = None
    ) -> BreezartError | None:
        """Zero the energy total.

        Args:
            marker: Reset marker to store, defaults to seconds since 1.1.2001.

        Returns:
            None on success, otherwise the storage error wrapped as BreezartError.

        """
        if marker is None:
            marker = eve_reset_marker(dt_util.utcnow())
        try:
            await self._accumulator.async_reset(marker)
        except Exception as err:
            _LOGGER.exception("%s: failed to persist energy reset", self._name)
            error = BreezartError(f"Energy reset failed: {err}")
            error.__cause__ = err
            return error
        finally:
            self._sync_energy()
            self._notify_update()
        return None

    def _sync_energy(self) -> None:
        self._state.total_energy = self._accumulator.total_energy
        self._state.reset_marker = self._accumulator.reset_marker
