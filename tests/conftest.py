"""Pytest configuration and fixtures for Breezart tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import homeassistant.core  # noqa: F401  # load HA core before helpers.storage (import-cycle order)
import pytest

from custom_components.breezart.models import EnergyRecord
from custom_components.breezart.session import BreezartSession

if TYPE_CHECKING:
    from collections.abc import Callable


class FakeBreezartClient:
    """In-memory stand-in for a Breezart device client."""

    def __init__(self) -> None:
        self.connected = False

        self.power_on = True
        self.speed_target = 40
        self.temperature_target = 22
        self.mode_set = 1
        self.mode_state = 0
        self.supply_temperature = 19.5
        self.filter_change = 0
        self.filter_dust = 35
        self.power_consumption = 120.0

        self.firmware_version = 312
        self.protocol_version = 2
        self.speed_min = None
        self.speed_max = None
        self.temperature_min = None
        self.temperature_max = None

        self.connect_error: Exception | None = None
        self.pull_error: Exception | None = None
        self.connect_calls = 0
        self.pull_calls = 0

        self.async_set_power = AsyncMock()
        self.async_set_speed = AsyncMock()
        self.async_set_mode = AsyncMock()
        self.async_set_temperature = AsyncMock()

        self._connection_callbacks: list[Callable[[bool], None]] = []
        self._error_callbacks: list[Callable[[Exception], None]] = []

    def register_connection_callback(
        self, callback: Callable[[bool], None]
    ) -> Callable[[], None]:
        self._connection_callbacks.append(callback)
        return lambda: self._connection_callbacks.remove(callback)

    def register_error_callback(
        self, callback: Callable[[Exception], None]
    ) -> Callable[[], None]:
        self._error_callbacks.append(callback)
        return lambda: self._error_callbacks.remove(callback)

    async def async_connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        self.emit_connection(connected=True)

    async def async_pull_status(self) -> None:
        self.pull_calls += 1
        if self.pull_error is not None:
            raise self.pull_error

    def emit_connection(self, *, connected: bool) -> None:
        self.connected = connected
        for callback in list(self._connection_callbacks):
            callback(connected)

    def emit_error(self, err: Exception) -> None:
        for callback in list(self._error_callbacks):
            callback(err)


class InMemoryEnergyStorage:
    """Energy storage keeping the persisted record in memory."""

    def __init__(self, record: EnergyRecord | None = None) -> None:
        self.record = record or EnergyRecord()
        self.loads = 0
        self.saves: list[EnergyRecord] = []

    async def async_load(self) -> EnergyRecord:
        self.loads += 1
        return EnergyRecord(self.record.total_energy, self.record.reset_marker)

    async def async_save(self, record: EnergyRecord) -> None:
        self.record = EnergyRecord(record.total_energy, record.reset_marker)
        self.saves.append(self.record)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def client() -> FakeBreezartClient:
    """Fixture providing a disconnected fake device client."""
    return FakeBreezartClient()


@pytest.fixture
def energy_storage() -> InMemoryEnergyStorage:
    """Fixture providing empty in-memory energy storage."""
    return InMemoryEnergyStorage()


@pytest.fixture
def clock() -> FakeClock:
    """Fixture providing a hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def session(client: FakeBreezartClient) -> BreezartSession:
    """Fixture providing a session with a short reconnect delay."""
    return BreezartSession(client, "Test Breezart", reconnect_delay=0.01)
