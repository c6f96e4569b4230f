"""Fixtures for ble_light tests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ble_light.const import DEVICE_NAME


@pytest.fixture
def ble_device() -> MagicMock:
    """A BLEDevice as returned by a scan."""
    device = MagicMock()
    device.name = DEVICE_NAME
    device.address = "24:0A:C4:00:11:22"
    device.rssi = -60
    return device


@pytest.fixture
def write_char() -> MagicMock:
    """The color characteristic."""
    char = MagicMock()
    char.uuid = "0000290b-0000-1000-8000-00805f9b34fb"
    char.properties = ["read", "write"]
    return char


@pytest.fixture
def bleak_client(write_char: MagicMock) -> MagicMock:
    """A connected client exposing the color service and characteristic."""
    service = MagicMock()
    service.get_characteristic.return_value = write_char

    client = MagicMock()
    client.is_connected = True
    client.services.get_service.return_value = service
    client.write_gatt_char = AsyncMock(return_value=None)
    client.disconnect = AsyncMock(return_value=True)
    return client


@pytest.fixture
def mock_establish_connection(bleak_client: MagicMock) -> Generator[AsyncMock]:
    """Patch establish_connection so connects return bleak_client."""
    with patch(
        "ble_light.session.establish_connection",
        new=AsyncMock(return_value=bleak_client),
    ) as mock_connect:
        yield mock_connect


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    """Let pending tasks on the loop run."""

    async def _settle(iterations: int = 10) -> None:
        for _ in range(iterations):
            await asyncio.sleep(0)

    return _settle
