"""
Configuration validation for Breezart devices.

This module turns a raw device mapping into a validated
``BreezartDeviceConfig`` using voluptuous, the same way Home Assistant
validates integration configuration.
"""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant.const import CONF_HOST, CONF_NAME, CONF_PASSWORD, CONF_PORT

from .const import (
    CONF_DEBOUNCE_WINDOW,
    CONF_POLL_INTERVAL,
    CONF_RECONNECT_BACKOFF,
    CONF_RECONNECT_DELAY,
    CONF_RECONNECT_MAX_ATTEMPTS,
    CONF_RECONNECT_MAX_DELAY,
    DEBOUNCE_WINDOW,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_RECONNECT_BACKOFF,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_RECONNECT_MAX_DELAY,
)
from .models import BreezartDeviceConfig

_LOGGER = logging.getLogger(__name__)

POSITIVE_SECONDS = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))

OPTION_KEYS = (
    CONF_POLL_INTERVAL,
    CONF_DEBOUNCE_WINDOW,
    CONF_RECONNECT_DELAY,
    CONF_RECONNECT_BACKOFF,
    CONF_RECONNECT_MAX_DELAY,
    CONF_RECONNECT_MAX_ATTEMPTS,
)

DEVICE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME): vol.All(str, vol.Length(min=1)),
        vol.Required(CONF_HOST): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        # The unit password is a number entered on its control panel
        vol.Required(CONF_PASSWORD): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(
            CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL
        ): POSITIVE_SECONDS,
        vol.Optional(CONF_DEBOUNCE_WINDOW, default=DEBOUNCE_WINDOW): vol.All(
            vol.Coerce(float), vol.Range(min=0)
        ),
        vol.Optional(
            CONF_RECONNECT_DELAY, default=DEFAULT_RECONNECT_DELAY
        ): POSITIVE_SECONDS,
        vol.Optional(
            CONF_RECONNECT_BACKOFF, default=DEFAULT_RECONNECT_BACKOFF
        ): vol.All(vol.Coerce(float), vol.Range(min=1)),
        vol.Optional(
            CONF_RECONNECT_MAX_DELAY, default=DEFAULT_RECONNECT_MAX_DELAY
        ): POSITIVE_SECONDS,
        vol.Optional(CONF_RECONNECT_MAX_ATTEMPTS, default=None): vol.Any(
            None, vol.All(vol.Coerce(int), vol.Range(min=1))
        ),
    }
)


def parse_device_config(raw: dict[str, Any]) -> BreezartDeviceConfig:
    """
    Validate ``raw`` and build a device configuration.

    Args:
        raw: Device mapping with name, host, port, password and options.

    Returns:
        The validated configuration.

    Raises:
        vol.Invalid: If the mapping does not match ``DEVICE_SCHEMA``.

    """
    try:
        data = DEVICE_SCHEMA(raw)
    except vol.Invalid as err:
        _LOGGER.error("Invalid Breezart device configuration: %s", err)
        raise

    return BreezartDeviceConfig(
        name=data[CONF_NAME],
        host=data[CONF_HOST],
        port=data[CONF_PORT],
        password=data[CONF_PASSWORD],
        options={key: data[key] for key in OPTION_KEYS},
    )
