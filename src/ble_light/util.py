from __future__ import annotations

import colorsys

from .models import Color, ConnectionState, StatusIndicator

_STATE_TO_INDICATOR = {
    ConnectionState.CONNECTED: StatusIndicator.AFFIRMATIVE,
    ConnectionState.DISCONNECTED: StatusIndicator.NEGATIVE,
    ConnectionState.CONNECTING: StatusIndicator.TRANSITIONAL,
}


def status_indicator(state: ConnectionState | None) -> StatusIndicator:
    """Map a connection state to the indicator color used by a status badge."""
    return _STATE_TO_INDICATOR.get(state, StatusIndicator.NEUTRAL)  # type: ignore[arg-type]


def color_from_hex(value: str) -> Color:
    """Parse ``RRGGBB`` or ``#RRGGBB`` into a Color."""
    text = value.strip().removeprefix("#")
    if len(text) != 6:
        raise ValueError(f"Invalid hex color: {value!r}")
    try:
        raw = bytes.fromhex(text)
    except ValueError as err:
        raise ValueError(f"Invalid hex color: {value!r}") from err
    return Color(raw[0], raw[1], raw[2])


def color_to_hex(color: Color) -> str:
    return "#{:02X}{:02X}{:02X}".format(*color.rgb)


def color_from_hsv(hue: float, saturation: float, value: float) -> Color:
    """Convert a color wheel position to a Color.

    hue is in degrees [0, 360), saturation and value in [0, 1].
    """
    r, g, b = colorsys.hsv_to_rgb((hue % 360) / 360, saturation, value)
    return Color(round(r * 255), round(g * 255), round(b * 255))
