from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .const import DOMAIN
from .device import BreezartDevice
from .storage import BreezartEnergyStore

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .client import BreezartClient
    from .models import BreezartDeviceConfig

_LOGGER = logging.getLogger(__name__)


async def async_setup_device(
    hass: HomeAssistant,
    client: BreezartClient,
    config: BreezartDeviceConfig,
) -> BreezartDevice:
    """Create, start and register the synchronized state for one device."""
    device_id = config.device_id
    devices = hass.data.setdefault(DOMAIN, {})

    if device_id in devices:
        _LOGGER.warning(
            "Device %s (%s) is already set up, reusing it", config.name, device_id
        )
        return devices[device_id]

    _LOGGER.info("Setting up Breezart device %s (%s)", config.name, device_id)
    store = BreezartEnergyStore(hass, device_id)
    device = BreezartDevice.from_config(client, store, config)
    await device.async_start()

    devices[device_id] = device
    _LOGGER.debug("Stored device %s, %d device(s) active", device_id, len(devices))
    return device


async def async_unload_device(hass: HomeAssistant, device_id: str) -> bool:
    """Stop and forget the device registered under ``device_id``."""
    device: BreezartDevice | None = hass.data.get(DOMAIN, {}).pop(device_id, None)
    if device is None:
        _LOGGER.warning("No Breezart device %s to unload", device_id)
        return False

    await device.async_stop()
    _LOGGER.info("Unloaded Breezart device %s", device_id)
    return True
