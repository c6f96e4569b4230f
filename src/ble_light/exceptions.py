from __future__ import annotations

import asyncio

from bleak.exc import BleakError

BLEAK_EXCEPTIONS = (AttributeError, BleakError, asyncio.exceptions.TimeoutError)


class BLELightError(Exception):
    """Base class for ble_light errors."""


class CharacteristicMissingError(BLELightError):
    """Raised when a characteristic is missing."""


class DeviceNotFoundError(BLELightError):
    """Raised when no matching advertisement was seen before the timeout."""


class InvalidStateTransitionError(BLELightError):
    """Raised when the connection state machine is driven out of order."""
