from __future__ import annotations

import logging
from collections.abc import Callable

from bleak.backends.device import BLEDevice
from bleak.backends.service import BleakGATTCharacteristic, BleakGATTServiceCollection
from bleak_retry_connector import (
    BleakClientWithServiceCache,
    BleakNotFoundError,
    establish_connection,
)

from .const import (
    BLUETOOTH_CONNECT,
    CHARACTERISTIC_UUID,
    CONNECT_ATTEMPTS,
    DEVICE_NAME,
    SERVICE_UUID,
)
from .exceptions import (
    BLEAK_EXCEPTIONS,
    CharacteristicMissingError,
    InvalidStateTransitionError,
)
from .models import ConnectionState
from .permissions import PermissionGate
from .pipeline import ColorWritePipeline

_LOGGER = logging.getLogger(__name__)

_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.DISCONNECTED: frozenset({ConnectionState.CONNECTING}),
    ConnectionState.PERMISSION_DENIED: frozenset(
        {ConnectionState.CONNECTING, ConnectionState.DISCONNECTED}
    ),
    ConnectionState.CONNECTING: frozenset(
        {
            ConnectionState.CONNECTED,
            ConnectionState.DISCONNECTED,
            ConnectionState.PERMISSION_DENIED,
        }
    ),
    ConnectionState.CONNECTED: frozenset({ConnectionState.DISCONNECTED}),
}


class ConnectionSession:
    """Own one GATT link to the light and its connection state.

    The session is the only writer of ConnectionState. Transitions are
    driven by discrete events: a connection request, a permission check,
    the link opening, the link dropping or the owner tearing it down.
    Entering CONNECTED binds the write pipeline to this session, leaving
    it unbinds the pipeline.
    """

    def __init__(
        self,
        pipeline: ColorWritePipeline,
        permission_gate: PermissionGate | None = None,
        *,
        service_uuid: str = SERVICE_UUID,
        characteristic_uuid: str = CHARACTERISTIC_UUID,
    ) -> None:
        """Init the ConnectionSession."""
        self._pipeline = pipeline
        self._permission_gate = permission_gate or PermissionGate()
        self._service_uuid = service_uuid
        self._characteristic_uuid = characteristic_uuid
        self._state = ConnectionState.DISCONNECTED
        self._ble_device: BLEDevice | None = None
        self._client: BleakClientWithServiceCache | None = None
        self._write_char: BleakGATTCharacteristic | None = None
        self._expected_disconnect = False
        self._callbacks: list[Callable[[ConnectionState], None]] = []

    @property
    def name(self) -> str:
        """Get the name of the device."""
        if self._ble_device is None:
            return DEVICE_NAME
        return self._ble_device.name or self._ble_device.address

    @property
    def state(self) -> ConnectionState:
        """Return the state."""
        return self._state

    @property
    def ble_device(self) -> BLEDevice | None:
        return self._ble_device

    def register_callback(
        self, callback: Callable[[ConnectionState], None]
    ) -> Callable[[], None]:
        """Register a callback to be called when the state changes.

        The callback is called once right away with the current state.
        """

        def unregister_callback() -> None:
            self._callbacks.remove(callback)

        self._callbacks.append(callback)
        self._call(callback)
        return unregister_callback

    def request(self) -> None:
        """Start a new connection attempt."""
        self._set_state(ConnectionState.CONNECTING)

    def deny(self) -> None:
        """Abandon the attempt because a permission is missing."""
        self._set_state(ConnectionState.PERMISSION_DENIED)

    def abort(self) -> None:
        """Abandon the attempt before a link was opened."""
        self._set_state(ConnectionState.DISCONNECTED)

    async def connect(self, ble_device: BLEDevice) -> None:
        """Open a GATT link to ``ble_device``.

        Failures are logged and surface as DISCONNECTED, they are not
        retried.
        """
        if self._state is not ConnectionState.CONNECTING:
            raise InvalidStateTransitionError(
                f"connect() requires {ConnectionState.CONNECTING}, not {self._state}"
            )
        self._ble_device = ble_device
        if not self._permission_gate.has_permission(BLUETOOTH_CONNECT):
            _LOGGER.warning("%s: Missing %s permission", self.name, BLUETOOTH_CONNECT)
            self.deny()
            return

        _LOGGER.debug("%s: Connecting; RSSI: %s", self.name, self.rssi)
        self._expected_disconnect = False
        try:
            client = await establish_connection(
                BleakClientWithServiceCache,
                ble_device,
                self.name,
                self._disconnected,
                max_attempts=CONNECT_ATTEMPTS,
            )
        except BleakNotFoundError:
            _LOGGER.error(
                "%s: device not found, no longer in range, or poor RSSI: %s",
                self.name,
                self.rssi,
                exc_info=True,
            )
            self._abort_if_connecting()
            return
        except BLEAK_EXCEPTIONS:
            _LOGGER.error(
                "%s: Failed to connect; RSSI: %s", self.name, self.rssi, exc_info=True
            )
            self._abort_if_connecting()
            return

        if self._state is not ConnectionState.CONNECTING:
            # Torn down while the link was being opened.
            _LOGGER.debug("%s: Connect superseded, dropping link", self.name)
            self._expected_disconnect = True
            await client.disconnect()
            return

        _LOGGER.debug("%s: Connected; RSSI: %s", self.name, self.rssi)
        self._client = client
        self._write_char = self._resolve_characteristic(client.services)
        # Observers may submit a color as soon as they see CONNECTED.
        self._pipeline.bind(self)
        self._set_state(ConnectionState.CONNECTED)

    async def write(self, payload: bytes) -> None:
        """Write one payload to the color characteristic."""
        client = self._client
        if client is None or not client.is_connected:
            raise CharacteristicMissingError("Not connected")
        if self._write_char is None:
            raise CharacteristicMissingError("Write characteristic missing")
        _LOGGER.debug("%s: Writing %s", self.name, payload.hex())
        await client.write_gatt_char(
            self._write_char, payload, "write" in self._write_char.properties
        )

    async def disconnect(self) -> None:
        """Tear down the link and return to DISCONNECTED."""
        _LOGGER.debug("%s: Disconnect", self.name)
        client = self._client
        self._expected_disconnect = True
        self._client = None
        self._write_char = None
        self._pipeline.unbind()
        if self._state is not ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.DISCONNECTED)
        if client and client.is_connected:
            try:
                await client.disconnect()
            except BLEAK_EXCEPTIONS:
                _LOGGER.debug("%s: Error while disconnecting", self.name, exc_info=True)

    @property
    def rssi(self) -> int | None:
        return getattr(self._ble_device, "rssi", None)

    def _resolve_characteristic(
        self, services: BleakGATTServiceCollection
    ) -> BleakGATTCharacteristic | None:
        """Resolve the color characteristic, or None if the peripheral lacks it."""
        service = services.get_service(self._service_uuid)
        if service is None:
            _LOGGER.warning(
                "%s: Service %s not found; color writes disabled",
                self.name,
                self._service_uuid,
            )
            return None
        char = service.get_characteristic(self._characteristic_uuid)
        if char is None:
            _LOGGER.warning(
                "%s: Characteristic %s not found; color writes disabled",
                self.name,
                self._characteristic_uuid,
            )
        return char

    def _disconnected(self, client: BleakClientWithServiceCache) -> None:
        """Disconnected callback."""
        if self._expected_disconnect:
            _LOGGER.debug(
                "%s: Disconnected from device; RSSI: %s", self.name, self.rssi
            )
            return
        _LOGGER.warning(
            "%s: Device unexpectedly disconnected; RSSI: %s",
            self.name,
            self.rssi,
        )
        if client is not self._client:
            return
        self._client = None
        self._write_char = None
        self._pipeline.unbind()
        if self._state is ConnectionState.CONNECTED:
            self._set_state(ConnectionState.DISCONNECTED)

    def _abort_if_connecting(self) -> None:
        if self._state is ConnectionState.CONNECTING:
            self.abort()

    def _set_state(self, state: ConnectionState) -> None:
        if state not in _TRANSITIONS[self._state]:
            raise InvalidStateTransitionError(f"{self._state} -> {state}")
        _LOGGER.debug("%s: %s -> %s", self.name, self._state.value, state.value)
        self._state = state
        self._fire_callbacks()

    def _fire_callbacks(self) -> None:
        """Fire the callbacks."""
        for callback in list(self._callbacks):
            self._call(callback)

    def _call(self, callback: Callable[[ConnectionState], None]) -> None:
        try:
            callback(self._state)
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception("%s: Error in state callback %s", self.name, callback)
