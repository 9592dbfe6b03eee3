"""Constants for the Breezart integration.

This module contains the constants used throughout the integration,
including timing defaults, configuration keys and device value ranges.
"""

from datetime import UTC, datetime

DOMAIN = "breezart"

DEFAULT_PORT = 1560

DEFAULT_POLL_INTERVAL = 1  # Seconds between status pulls
DEBOUNCE_WINDOW = 3  # Seconds a locally set value wins over poll results
MAX_SAMPLE_INTERVAL = 60  # Seconds one power sample may stand for at most

DEFAULT_RECONNECT_DELAY = 5  # Seconds to wait before reconnecting
DEFAULT_RECONNECT_BACKOFF = 1.0  # 1.0 keeps the delay fixed
DEFAULT_RECONNECT_MAX_DELAY = 300

CONF_POLL_INTERVAL = "poll_interval"
CONF_DEBOUNCE_WINDOW = "debounce_window"
CONF_RECONNECT_DELAY = "reconnect_delay"
CONF_RECONNECT_BACKOFF = "reconnect_backoff"
CONF_RECONNECT_MAX_DELAY = "reconnect_max_delay"
CONF_RECONNECT_MAX_ATTEMPTS = "reconnect_max_attempts"

STORAGE_VERSION = 1
STORAGE_KEY_FMT = "breezart.energy.{device_id}"

# Eve.app stamps total consumption resets in seconds since 1.1.2001
EVE_EPOCH = datetime(2001, 1, 1, tzinfo=UTC)

MODE_HEAT = 1
MODE_COOL = 2
MODE_AUTO = 3
MODE_OFF = 4  # Heating/cooling disabled, ventilation only
VALID_MODES = (MODE_HEAT, MODE_COOL, MODE_AUTO, MODE_OFF)

FILTER_DUST_UNKNOWN = 255
FILTER_LIFE_MAX = 100

DEFAULT_ACTIVE = False
DEFAULT_ROTATION_SPEED = 40
DEFAULT_MODE = MODE_HEAT
DEFAULT_HEATER_COOLER_STATE = 0
DEFAULT_HEATING_THRESHOLD_TEMPERATURE = 24
