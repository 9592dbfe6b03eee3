"""Data models for Breezart integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from .const import (
    CONF_DEBOUNCE_WINDOW,
    CONF_POLL_INTERVAL,
    CONF_RECONNECT_BACKOFF,
    CONF_RECONNECT_DELAY,
    CONF_RECONNECT_MAX_ATTEMPTS,
    CONF_RECONNECT_MAX_DELAY,
    DEBOUNCE_WINDOW,
    DEFAULT_ACTIVE,
    DEFAULT_HEATER_COOLER_STATE,
    DEFAULT_HEATING_THRESHOLD_TEMPERATURE,
    DEFAULT_MODE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RECONNECT_BACKOFF,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_RECONNECT_MAX_DELAY,
    DEFAULT_ROTATION_SPEED,
    FILTER_DUST_UNKNOWN,
    FILTER_LIFE_MAX,
)

if TYPE_CHECKING:
    from .client import BreezartClient, BreezartError


class ConnectionState(StrEnum):
    """Lifecycle state of the link to one device."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class DebouncedField(StrEnum):
    """State fields that can be set locally and are shielded from polls."""

    ACTIVE = "active"
    ROTATION_SPEED = "rotation_speed"
    MODE = "mode"
    HEATING_THRESHOLD_TEMPERATURE = "heating_threshold_temperature"


def normalize_filter_life(filter_dust: int | None) -> int | None:
    """Return the filter life level in percent, or None when unknown."""
    if filter_dust is None or filter_dust == FILTER_DUST_UNKNOWN:
        return None
    return min(int(filter_dust), FILTER_LIFE_MAX)


@dataclass(frozen=True, slots=True)
class BreezartStatus:
    """Snapshot of the device registers taken after a status pull."""

    power_on: bool
    speed_target: int
    temperature_target: int
    mode_set: int
    mode_state: int
    supply_temperature: float | None
    filter_change: int
    filter_life_level: int | None
    power_consumption: float | None

    @classmethod
    def from_client(cls, client: BreezartClient) -> BreezartStatus:
        """Build a snapshot from the registers currently held by ``client``."""
        return cls(
            power_on=bool(client.power_on),
            speed_target=int(client.speed_target),
            temperature_target=int(client.temperature_target),
            mode_set=int(client.mode_set),
            mode_state=int(client.mode_state),
            supply_temperature=client.supply_temperature,
            filter_change=int(client.filter_change),
            filter_life_level=normalize_filter_life(client.filter_dust),
            power_consumption=client.power_consumption,
        )


@dataclass(frozen=True, slots=True)
class BreezartDeviceInfo:
    """Static-ish device properties reported alongside the status registers."""

    firmware_version: int | None = None
    protocol_version: int | None = None
    speed_min: int | None = None
    speed_max: int | None = None
    temperature_min: int | None = None
    temperature_max: int | None = None

    @classmethod
    def from_client(cls, client: BreezartClient) -> BreezartDeviceInfo:
        """Read firmware and range registers from ``client``."""
        return cls(
            firmware_version=client.firmware_version,
            protocol_version=client.protocol_version,
            speed_min=client.speed_min,
            speed_max=client.speed_max,
            temperature_min=client.temperature_min,
            temperature_max=client.temperature_max,
        )


@dataclass(slots=True)
class BreezartDeviceState:
    """In-memory state of one device as seen by the outside world."""

    active: bool = DEFAULT_ACTIVE
    rotation_speed: int = DEFAULT_ROTATION_SPEED
    current_temperature: float | None = None
    mode: int = DEFAULT_MODE
    current_heater_cooler_state: int = DEFAULT_HEATER_COOLER_STATE
    heating_threshold_temperature: int = DEFAULT_HEATING_THRESHOLD_TEMPERATURE
    filter_change: int = 0
    filter_life_level: int | None = None
    current_power: float | None = None
    last_error: BreezartError | None = None
    total_energy: float = 0.0
    reset_marker: int = 0


@dataclass(slots=True)
class EnergyRecord:
    """Persisted energy accumulator state."""

    total_energy: float = 0.0
    reset_marker: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnergyRecord:
        return cls(
            total_energy=float(data.get("total_energy") or 0.0),
            reset_marker=int(data.get("reset_marker") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_energy": self.total_energy,
            "reset_marker": self.reset_marker,
        }


@dataclass(frozen=True, slots=True)
class BreezartDeviceConfig:
    """Validated configuration of a single Breezart device."""

    name: str
    host: str
    port: int
    password: int
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def device_id(self) -> str:
        """Return the stable identity used for storage keys."""
        return f"{self.host}:{self.port}"

    @property
    def poll_interval(self) -> float:
        return float(self.options.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL))

    @property
    def debounce_window(self) -> float:
        return float(self.options.get(CONF_DEBOUNCE_WINDOW, DEBOUNCE_WINDOW))

    @property
    def reconnect_delay(self) -> float:
        return float(self.options.get(CONF_RECONNECT_DELAY, DEFAULT_RECONNECT_DELAY))

    @property
    def reconnect_backoff(self) -> float:
        return float(
            self.options.get(CONF_RECONNECT_BACKOFF, DEFAULT_RECONNECT_BACKOFF)
        )

    @property
    def reconnect_max_delay(self) -> float:
        return float(
            self.options.get(CONF_RECONNECT_MAX_DELAY, DEFAULT_RECONNECT_MAX_DELAY)
        )

    @property
    def reconnect_max_attempts(self) -> int | None:
        return self.options.get(CONF_RECONNECT_MAX_ATTEMPTS)
