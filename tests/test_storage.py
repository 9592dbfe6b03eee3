"""Tests for the Home Assistant backed energy store."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from custom_components.breezart.const import STORAGE_VERSION
from custom_components.breezart.models import EnergyRecord
from custom_components.breezart.storage import BreezartEnergyStore


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def mock_store() -> Mock:
    """Create a mock Home Assistant Store."""
    store = Mock()
    store.key = "breezart.energy.10.0.0.5:1560"
    store.async_load = AsyncMock(return_value=None)
    store.async_save = AsyncMock()
    return store


class TestBreezartEnergyStore:
    """Tests for BreezartEnergyStore."""

    def test_store_key_per_device(self, mock_hass: Mock, mock_store: Mock) -> None:
        """Test that each device gets its own storage key."""
        with patch(
            "custom_components.breezart.storage.Store", return_value=mock_store
        ) as store_cls:
            BreezartEnergyStore(mock_hass, "10.0.0.5:1560")

        store_cls.assert_called_once_with(
            mock_hass, STORAGE_VERSION, "breezart.energy.10.0.0.5:1560"
        )

    @pytest.mark.asyncio
    async def test_load_without_data(self, mock_hass: Mock, mock_store: Mock) -> None:
        """Test that a missing file yields an empty record."""
        with patch("custom_components.breezart.storage.Store", return_value=mock_store):
            store = BreezartEnergyStore(mock_hass, "10.0.0.5:1560")

        assert await store.async_load() == EnergyRecord(0.0, 0)

    @pytest.mark.asyncio
    async def test_load_existing_data(self, mock_hass: Mock, mock_store: Mock) -> None:
        """Test that stored values are returned."""
        mock_store.async_load.return_value = {
            "total_energy": 12.75,
            "reset_marker": 700000000,
        }
        with patch("custom_components.breezart.storage.Store", return_value=mock_store):
            store = BreezartEnergyStore(mock_hass, "10.0.0.5:1560")

        assert await store.async_load() == EnergyRecord(12.75, 700000000)

    @pytest.mark.asyncio
    async def test_save(self, mock_hass: Mock, mock_store: Mock) -> None:
        """Test that records are written as plain dictionaries."""
        with patch("custom_components.breezart.storage.Store", return_value=mock_store):
            store = BreezartEnergyStore(mock_hass, "10.0.0.5:1560")

        await store.async_save(EnergyRecord(1.5, 42))

        mock_store.async_save.assert_awaited_once_with(
            {"total_energy": 1.5, "reset_marker": 42}
        )
