from __future__ import annotations

import asyncio
import logging

import async_timeout
from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from .const import DEFAULT_SCAN_TIMEOUT
from .exceptions import DeviceNotFoundError

_LOGGER = logging.getLogger(__name__)


class DeviceScanner:
    """Find the first peripheral advertising a given name."""

    def __init__(self, timeout: float | None = DEFAULT_SCAN_TIMEOUT) -> None:
        """Init the DeviceScanner."""
        self._timeout = timeout

    async def scan(self, name_filter: str) -> BLEDevice:
        """Scan until a device advertising ``name_filter`` is seen.

        The first match wins and the scan is stopped right away. Cancelling
        the calling task stops the scan as well. If a timeout is configured
        and expires first, DeviceNotFoundError is raised.
        """
        future: asyncio.Future[BLEDevice] = asyncio.get_running_loop().create_future()

        def on_detected(device: BLEDevice, adv: AdvertisementData) -> None:
            if future.done():
                return
            if (adv.local_name or device.name) != name_filter:
                return
            _LOGGER.debug("%s: Found device: %s", name_filter, device.address)
            future.set_result(device)

        scanner = BleakScanner(detection_callback=on_detected)
        _LOGGER.debug("%s: Starting scan; timeout: %s", name_filter, self._timeout)
        try:
            await scanner.start()
            if self._timeout is None:
                return await future
            try:
                async with async_timeout.timeout(self._timeout):
                    return await future
            except asyncio.TimeoutError as err:
                raise DeviceNotFoundError(
                    f"{name_filter} not found within {self._timeout}s"
                ) from err
        finally:
            _LOGGER.debug("%s: Stopping scan", name_filter)
            await scanner.stop()
