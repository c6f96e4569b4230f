from __future__ import annotations

BASE_UUID_FORMAT = "0000{}-0000-1000-8000-00805f9b34fb"

# Peripheral firmware advertises this name and exposes a single writable
# characteristic that takes three raw bytes: R, G, B.
DEVICE_NAME = "ESP32_Light"

SERVICE_UUID = BASE_UUID_FORMAT.format("181f")
CHARACTERISTIC_UUID = BASE_UUID_FORMAT.format("290b")

BLUETOOTH_SCAN = "BLUETOOTH_SCAN"
BLUETOOTH_CONNECT = "BLUETOOTH_CONNECT"
REQUIRED_PERMISSIONS = (BLUETOOTH_SCAN, BLUETOOTH_CONNECT)

CONNECT_ATTEMPTS = 1

# None means scan until a match is found or the scan is cancelled.
DEFAULT_SCAN_TIMEOUT: float | None = None
