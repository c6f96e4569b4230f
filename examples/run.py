import asyncio
import logging

from ble_light import ConnectionState, SessionController, status_indicator

_LOGGER = logging.getLogger(__name__)


async def run() -> None:
    controller = SessionController(scan_timeout=30)
    connected = asyncio.Event()

    def on_state_changed(state: ConnectionState) -> None:
        _LOGGER.info("State changed: %s (%s)", state.value, status_indicator(state).value)
        if state is ConnectionState.CONNECTED:
            connected.set()

    cancel_callback = controller.register_callback(on_state_changed)
    _LOGGER.info("start_session...")
    task = controller.start_session()
    if task is not None:
        await task
    if not connected.is_set():
        _LOGGER.info("not connected: %s", controller.state.value)
        cancel_callback()
        return

    _LOGGER.info("submit_color(red)...")
    controller.submit_color(255, 0, 0)
    await asyncio.sleep(1)
    _LOGGER.info("submit_color(green)...")
    controller.submit_color(0, 255, 0)
    await asyncio.sleep(1)
    _LOGGER.info("submit_color(blue)...")
    controller.submit_color(0, 0, 255)
    await asyncio.sleep(1)
    _LOGGER.info("fade (coalesced)...")
    for level in range(256):
        controller.submit_color(level, level, level)
        await asyncio.sleep(0.005)
    await asyncio.sleep(1)
    _LOGGER.info("finish...")
    cancel_callback()
    await controller.stop()
    _LOGGER.info("done")


logging.basicConfig(level=logging.INFO)
logging.getLogger("ble_light").setLevel(logging.DEBUG)
asyncio.run(run())
