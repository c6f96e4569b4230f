from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Color:

    r: int = 0
    g: int = 0
    b: int = 0

    def __post_init__(self) -> None:
        for value in (self.r, self.g, self.b):
            if not isinstance(value, int):
                raise ValueError(f"Value {value!r} is not an integer")
            if not 0 <= value <= 255:
                raise ValueError(f"Value {value} is outside the valid range of 0-255")

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b

    def to_bytes(self) -> bytes:
        """Return the write payload: one unsigned byte per channel, R G B."""
        return bytes(self.rgb)


class ConnectionState(Enum):
    """Coarse connection status shown to the user."""

    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"
    PERMISSION_DENIED = "Permission Denied"


class StatusIndicator(Enum):

    AFFIRMATIVE = "affirmative"
    NEGATIVE = "negative"
    TRANSITIONAL = "transitional"
    NEUTRAL = "neutral"
