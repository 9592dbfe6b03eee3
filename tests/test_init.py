"""Tests for setting up and unloading Breezart devices."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from custom_components.breezart import async_setup_device, async_unload_device
from custom_components.breezart.const import DOMAIN
from custom_components.breezart.models import BreezartDeviceConfig

from .conftest import FakeBreezartClient


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    hass = Mock()
    hass.data = {}
    return hass


@pytest.fixture
def config() -> BreezartDeviceConfig:
    """Create a device configuration."""
    return BreezartDeviceConfig("Hall", "10.0.0.5", 1560, 1234)


@pytest.fixture
def mock_device() -> Mock:
    """Create a mock device."""
    device = Mock()
    device.async_start = AsyncMock()
    device.async_stop = AsyncMock()
    return device


class TestAsyncSetupDevice:
    """Tests for async_setup_device."""

    @pytest.mark.asyncio
    async def test_setup_starts_and_registers_device(
        self,
        mock_hass: Mock,
        config: BreezartDeviceConfig,
        client: FakeBreezartClient,
        mock_device: Mock,
    ) -> None:
        """Test that a new device is created, started and stored."""
        with (
            patch("custom_components.breezart.BreezartEnergyStore") as store_cls,
            patch(
                "custom_components.breezart.BreezartDevice.from_config",
                return_value=mock_device,
            ) as from_config,
        ):
            device = await async_setup_device(mock_hass, client, config)

        assert device is mock_device
        store_cls.assert_called_once_with(mock_hass, "10.0.0.5:1560")
        from_config.assert_called_once_with(client, store_cls.return_value, config)
        mock_device.async_start.assert_awaited_once()
        assert mock_hass.data[DOMAIN] == {"10.0.0.5:1560": mock_device}

    @pytest.mark.asyncio
    async def test_setup_twice_reuses_device(
        self,
        mock_hass: Mock,
        config: BreezartDeviceConfig,
        client: FakeBreezartClient,
        mock_device: Mock,
    ) -> None:
        """Test that a device is only started once per identity."""
        mock_hass.data[DOMAIN] = {"10.0.0.5:1560": mock_device}

        with patch(
            "custom_components.breezart.BreezartDevice.from_config",
        ) as from_config:
            device = await async_setup_device(mock_hass, client, config)

        assert device is mock_device
        from_config.assert_not_called()


class TestAsyncUnloadDevice:
    """Tests for async_unload_device."""

    @pytest.mark.asyncio
    async def test_unload_stops_device(
        self, mock_hass: Mock, mock_device: Mock
    ) -> None:
        """Test that unloading stops and forgets the device."""
        mock_hass.data[DOMAIN] = {"10.0.0.5:1560": mock_device}

        assert await async_unload_device(mock_hass, "10.0.0.5:1560") is True

        mock_device.async_stop.assert_awaited_once()
        assert mock_hass.data[DOMAIN] == {}

    @pytest.mark.asyncio
    async def test_unload_unknown_device(self, mock_hass: Mock) -> None:
        """Test that unknown identities are reported."""
        assert await async_unload_device(mock_hass, "10.0.0.9:1560") is False
