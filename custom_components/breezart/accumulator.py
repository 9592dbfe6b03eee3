"""Energy accumulator integrating sampled power into a persisted total.

The accumulator never trusts its in-memory total across ticks: each sample
is added to the value loaded from storage and written straight back, so a
restart loses at most the energy of a single tick.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from .const import EVE_EPOCH
from .models import EnergyRecord

if TYPE_CHECKING:
    from datetime import datetime

_LOGGER = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
WATTS_PER_KILOWATT = 1000


class EnergyStorage(Protocol):
    """Load/save collaborator owning the persisted energy record."""

    async def async_load(self) -> EnergyRecord: ...

    async def async_save(self, record: EnergyRecord) -> None: ...


def energy_delta_kwh(power_w: float | None, interval_s: float) -> float:
    """Return the energy in kWh drawn at ``power_w`` over ``interval_s``.

    Missing or negative samples contribute nothing so the total stays
    monotonic between resets.
    """
    if power_w is None or power_w <= 0 or interval_s <= 0:
        return 0.0
    return power_w * interval_s / SECONDS_PER_HOUR / WATTS_PER_KILOWATT


def eve_reset_marker(now: datetime) -> int:
    """Return the reset marker for ``now`` as whole seconds since 1.1.2001."""
    return int((now - EVE_EPOCH).total_seconds())


class EnergyAccumulator:
    """Monotonic energy total with explicit reset."""

    def __init__(self, storage: EnergyStorage) -> None:
        self._storage = storage
        self._record = EnergyRecord()
        self._lock = asyncio.Lock()

    @property
    def total_energy(self) -> float:
        """Return the accumulated energy in kWh."""
        return self._record.total_energy

    @property
    def reset_marker(self) -> int:
        """Return the marker stamped at the last reset."""
        return self._record.reset_marker

    async def async_restore(self) -> None:
        """Load the persisted record so values are valid before the first tick."""
        async with self._lock:
            self._record = await self._storage.async_load()
        _LOGGER.debug(
            "Restored energy total %.4f kWh (reset marker %s)",
            self._record.total_energy,
            self._record.reset_marker,
        )

    async def async_add_sample(
        self, power_w: float | None, interval_s: float
    ) -> float:
        """Integrate one power sample and persist the new total.

        Returns:
            The energy in kWh added by this sample.

        """
        delta = energy_delta_kwh(power_w, interval_s)
        async with self._lock:
            persisted = await self._storage.async_load()
            self._record = EnergyRecord(
                total_energy=persisted.total_energy + delta,
                reset_marker=persisted.reset_marker,
            )
            await self._storage.async_save(self._record)
        return delta

    async def async_reset(self, marker: int) -> None:
        """Zero the total and stamp ``marker`` as the reset epoch."""
        async with self._lock:
            self._record = EnergyRecord(total_energy=0.0, reset_marker=marker)
            await self._storage.async_save(self._record)
        _LOGGER.info("Energy total reset (marker %s)", marker)
