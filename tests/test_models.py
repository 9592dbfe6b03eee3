"""Tests for Breezart data models."""

from types import SimpleNamespace

import pytest

from custom_components.breezart.models import (
    BreezartDeviceConfig,
    BreezartDeviceInfo,
    BreezartStatus,
    EnergyRecord,
    normalize_filter_life,
)


@pytest.mark.parametrize(
    ("filter_dust", "expected"),
    [(None, None), (255, None), (0, 0), (35, 35), (100, 100), (130, 100)],
)
def test_normalize_filter_life(filter_dust: int | None, expected: int | None) -> None:
    """Test filter readings mapped onto a percentage."""
    assert normalize_filter_life(filter_dust) == expected


class TestBreezartStatus:
    """Tests for BreezartStatus."""

    def test_from_client(self) -> None:
        """Test reading a snapshot from client registers."""
        client = SimpleNamespace(
            power_on=1,
            speed_target="45",
            temperature_target=21,
            mode_set=3,
            mode_state=1,
            supply_temperature=18.5,
            filter_change=0,
            filter_dust=255,
            power_consumption=None,
        )

        status = BreezartStatus.from_client(client)

        assert status.power_on is True
        assert status.speed_target == 45
        assert status.mode_set == 3
        assert status.filter_life_level is None
        assert status.power_consumption is None

    def test_from_client_rejects_garbage(self) -> None:
        """Test that malformed registers raise instead of producing state."""
        client = SimpleNamespace(
            power_on=True,
            speed_target="n/a",
            temperature_target=21,
            mode_set=1,
            mode_state=0,
            supply_temperature=None,
            filter_change=0,
            filter_dust=10,
            power_consumption=0.0,
        )

        with pytest.raises(ValueError, match="n/a"):
            BreezartStatus.from_client(client)


class TestBreezartDeviceInfo:
    """Tests for BreezartDeviceInfo."""

    def test_defaults_are_unknown(self) -> None:
        """Test that a fresh info object knows no ranges."""
        info = BreezartDeviceInfo()

        assert info.firmware_version is None
        assert info.speed_min is None
        assert info.temperature_max is None


class TestEnergyRecord:
    """Tests for EnergyRecord."""

    def test_from_dict_tolerates_missing_keys(self) -> None:
        """Test that partial payloads fall back to zero."""
        assert EnergyRecord.from_dict({}) == EnergyRecord(0.0, 0)
        assert EnergyRecord.from_dict({"total_energy": None}) == EnergyRecord()

    def test_to_dict(self) -> None:
        """Test the persisted layout."""
        assert EnergyRecord(2.0, 3).to_dict() == {
            "total_energy": 2.0,
            "reset_marker": 3,
        }


class TestBreezartDeviceConfig:
    """Tests for BreezartDeviceConfig."""

    def test_device_id(self) -> None:
        """Test that host and port identify the device."""
        config = BreezartDeviceConfig("Hall", "10.0.0.5", 1560, 1234)

        assert config.device_id == "10.0.0.5:1560"

    def test_option_defaults(self) -> None:
        """Test timing defaults when no options are given."""
        config = BreezartDeviceConfig("Hall", "10.0.0.5", 1560, 1234)

        assert config.poll_interval == 1
        assert config.debounce_window == 3
        assert config.reconnect_delay == 5
        assert config.reconnect_backoff == 1.0
        assert config.reconnect_max_delay == 300
        assert config.reconnect_max_attempts is None
