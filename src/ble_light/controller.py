from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from .const import DEFAULT_SCAN_TIMEOUT, DEVICE_NAME, REQUIRED_PERMISSIONS
from .exceptions import BLEAK_EXCEPTIONS, DeviceNotFoundError
from .models import Color, ConnectionState
from .permissions import PermissionGate
from .pipeline import ColorWritePipeline
from .scanner import DeviceScanner
from .session import ConnectionSession

_LOGGER = logging.getLogger(__name__)

_ACTIVE_STATES = (ConnectionState.CONNECTING, ConnectionState.CONNECTED)


class SessionController:
    """Entry point for the presentation layer.

    Create one per application and hand it to the UI. The UI calls
    start_session() to find and connect to the light, submit_color() to
    change its color, and observes the connection state through
    register_callback() or the state property.
    """

    def __init__(
        self,
        permission_gate: PermissionGate | None = None,
        scanner: DeviceScanner | None = None,
        pipeline: ColorWritePipeline | None = None,
        session: ConnectionSession | None = None,
        *,
        name_filter: str = DEVICE_NAME,
        scan_timeout: float | None = DEFAULT_SCAN_TIMEOUT,
    ) -> None:
        """Init the SessionController."""
        self._permission_gate = permission_gate or PermissionGate()
        self._scanner = scanner or DeviceScanner(timeout=scan_timeout)
        self._pipeline = pipeline or ColorWritePipeline()
        self._session = session or ConnectionSession(
            self._pipeline, self._permission_gate
        )
        self._name_filter = name_filter
        self._session_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ConnectionState:
        """Return the connection state."""
        return self._session.state

    @property
    def session(self) -> ConnectionSession:
        return self._session

    def register_callback(
        self, callback: Callable[[ConnectionState], None]
    ) -> Callable[[], None]:
        """Register a callback to be called when the connection state changes."""
        return self._session.register_callback(callback)

    def start_session(self) -> asyncio.Task[None] | None:
        """Scan for the light and connect to it.

        Does nothing while a session is connecting or connected. Returns the
        task running the attempt, which callers may await or ignore.
        """
        if self.state in _ACTIVE_STATES:
            _LOGGER.debug("%s: Session already %s", self._name_filter, self.state.value)
            return self._session_task
        self._cancel_session_task()
        self._session.request()
        self._session_task = asyncio.get_running_loop().create_task(
            self._async_run_session()
        )
        return self._session_task

    def submit_color(self, r: int, g: int, b: int) -> None:
        """Request a new color. Dropped while not connected."""
        color = Color(r, g, b)
        _LOGGER.debug("%s: Receiving color data: %s", self._name_filter, color)
        self._pipeline.submit(color)

    def submit_color_threadsafe(self, r: int, g: int, b: int) -> None:
        """Request a new color from a thread other than the event loop's."""
        self._pipeline.submit_threadsafe(Color(r, g, b))

    async def stop(self) -> None:
        """Cancel any pending scan and disconnect."""
        _LOGGER.debug("%s: Stop", self._name_filter)
        task = self._cancel_session_task()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._session.disconnect()

    def _cancel_session_task(self) -> asyncio.Task[None] | None:
        task = self._session_task
        self._session_task = None
        if task is None or task.done():
            return None
        _LOGGER.debug("%s: Cancelling stale session attempt", self._name_filter)
        task.cancel()
        return task

    async def _async_run_session(self) -> None:
        """Check permissions, scan, then connect."""
        if not self._permission_gate.has_permissions(*REQUIRED_PERMISSIONS):
            _LOGGER.warning("%s: Bluetooth permission denied", self._name_filter)
            self._session.deny()
            return
        try:
            try:
                ble_device = await self._scanner.scan(self._name_filter)
            except DeviceNotFoundError as ex:
                _LOGGER.warning("%s: %s", self._name_filter, ex)
                self._session.abort()
                return
            except BLEAK_EXCEPTIONS:
                _LOGGER.error("%s: Scan failed", self._name_filter, exc_info=True)
                self._session.abort()
                return
            _LOGGER.debug("%s: Found device: %s", self._name_filter, ble_device)
            await self._session.connect(ble_device)
        except asyncio.CancelledError:
            _LOGGER.debug("%s: Session attempt cancelled", self._name_filter)
            self._abort_if_current()
            raise
        except Exception:  # pylint: disable=broad-except
            _LOGGER.error(
                "%s: Session attempt failed", self._name_filter, exc_info=True
            )
            self._abort_if_current()

    def _abort_if_current(self) -> None:
        """Return to DISCONNECTED unless a newer attempt owns the session."""
        if asyncio.current_task() is not self._session_task:
            return
        if self.state is ConnectionState.CONNECTING:
            self._session.abort()
