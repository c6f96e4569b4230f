from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

from .exceptions import BLEAK_EXCEPTIONS, CharacteristicMissingError
from .models import Color

_LOGGER = logging.getLogger(__name__)

WRITE_EXCEPTIONS = (*BLEAK_EXCEPTIONS, EOFError)


class ColorSink(Protocol):
    """Anything that can push a color payload to the peripheral."""

    @property
    def name(self) -> str:
        ...

    async def write(self, payload: bytes) -> None:
        ...


class ColorWritePipeline:
    """Serialize color updates into characteristic writes.

    Producers overwrite a single pending slot; one worker task takes the
    latest value and writes it, so a burst of submissions during an
    in-flight write collapses into a single follow-up write carrying the
    most recent color. Only one write is ever in flight.

    All state is touched from the event loop thread only. Producers on
    other threads use submit_threadsafe.
    """

    def __init__(self) -> None:
        """Init the ColorWritePipeline."""
        self._pending: Color | None = None
        self._wakeup = asyncio.Event()
        self._sink: ColorSink | None = None
        self._worker: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def is_bound(self) -> bool:
        return self._sink is not None

    @property
    def pending(self) -> Color | None:
        """Return the color waiting to be written, if any."""
        return self._pending

    def submit(self, color: Color) -> None:
        """Replace the pending color and wake the worker."""
        if self._sink is None:
            _LOGGER.debug("Not bound, dropping color: %s", color)
            return
        self._pending = color
        self._wakeup.set()

    def submit_threadsafe(self, color: Color) -> None:
        """Submit a color from a thread other than the event loop's."""
        if self._loop is None:
            _LOGGER.debug("Not bound, dropping color: %s", color)
            return
        self._loop.call_soon_threadsafe(self.submit, color)

    def bind(self, sink: ColorSink) -> None:
        """Attach to a live connection and start the worker."""
        if self._sink is not None:
            self.unbind()
        _LOGGER.debug("%s: Binding write pipeline", sink.name)
        self._sink = sink
        self._loop = asyncio.get_running_loop()
        self._worker = self._loop.create_task(self._async_run(sink))

    def unbind(self) -> None:
        """Detach from the connection, discarding any pending color."""
        worker = self._worker
        sink = self._sink
        self._sink = None
        self._worker = None
        self._loop = None
        self._pending = None
        self._wakeup.clear()
        if worker and not worker.done():
            worker.cancel()
        if sink is not None:
            _LOGGER.debug("%s: Unbound write pipeline", sink.name)

    async def async_stop(self) -> None:
        """Unbind and wait for the worker to finish."""
        worker = self._worker
        self.unbind()
        if worker is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await worker

    def _take(self) -> Color | None:
        color = self._pending
        self._pending = None
        return color

    async def _async_run(self, sink: ColorSink) -> None:
        """Write the latest pending color each time the worker is woken."""
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            color = self._take()
            if color is None:
                continue
            try:
                await sink.write(color.to_bytes())
            except CharacteristicMissingError as ex:
                _LOGGER.debug("%s: Dropping color %s: %s", sink.name, color, ex)
            except WRITE_EXCEPTIONS:
                _LOGGER.warning(
                    "%s: Failed to write color %s", sink.name, color, exc_info=True
                )
            else:
                _LOGGER.debug("%s: Color changed to: %s", sink.name, color)
