"""Persistent energy storage for Breezart devices."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.helpers.storage import Store

from .const import STORAGE_KEY_FMT, STORAGE_VERSION
from .models import EnergyRecord

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class BreezartEnergyStore:
    """Home Assistant backed load/save collaborator for the energy total."""

    def __init__(self, hass: HomeAssistant, device_id: str) -> None:
        self._store: Store[dict] = Store(
            hass,
            STORAGE_VERSION,
            STORAGE_KEY_FMT.format(device_id=device_id),
        )

    async def async_load(self) -> EnergyRecord:
        data = await self._store.async_load()
        if not data:
            _LOGGER.debug("No stored energy record for %s", self._store.key)
            return EnergyRecord()
        return EnergyRecord.from_dict(data)

    async def async_save(self, record: EnergyRecord) -> None:
        await self._store.async_save(record.to_dict())
