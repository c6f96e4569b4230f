from __future__ import annotations

__version__ = "0.1.0"


from .const import CHARACTERISTIC_UUID, DEVICE_NAME, SERVICE_UUID
from .controller import SessionController
from .exceptions import (
    BLEAK_EXCEPTIONS,
    BLELightError,
    CharacteristicMissingError,
    DeviceNotFoundError,
    InvalidStateTransitionError,
)
from .models import Color, ConnectionState, StatusIndicator
from .permissions import PermissionGate
from .pipeline import ColorWritePipeline
from .scanner import DeviceScanner
from .session import ConnectionSession
from .util import color_from_hex, color_from_hsv, color_to_hex, status_indicator

__all__ = [
    "BLEAK_EXCEPTIONS",
    "BLELightError",
    "CHARACTERISTIC_UUID",
    "CharacteristicMissingError",
    "Color",
    "ColorWritePipeline",
    "ConnectionSession",
    "ConnectionState",
    "DEVICE_NAME",
    "DeviceNotFoundError",
    "DeviceScanner",
    "InvalidStateTransitionError",
    "PermissionGate",
    "SERVICE_UUID",
    "SessionController",
    "StatusIndicator",
    "color_from_hex",
    "color_from_hsv",
    "color_to_hex",
    "status_indicator",
]
