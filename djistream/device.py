"""
DJI camera live stream client.

This module provides the main client interface for driving a single camera
through pairing, Wi-Fi setup, configuration and live streaming.

All inputs (caller requests, advertisements, notifications, watchdog
expiry) become events on one queue. A single dispatcher task takes them
one at a time, runs the pure state machine, and executes the resulting
effects before taking the next event.

Example:
    >>> from djistream import DjiDevice, DeviceModel, Resolution
    >>> from djistream.transport import BleakTransport
    >>>
    >>> async def main():
    ...     async with DjiDevice("AA:BB:CC:DD:EE:FF", BleakTransport(), DeviceModel.OSMO_ACTION_4) as device:
    ...         await device.start_live_stream(
    ...             "Home", "secret123", "rtmp://example.com/live", Resolution.R1080P
    ...         )
    ...         ...
    ...         await device.stop_live_stream()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Callable

from djistream.exceptions import EncodeError, TransportError
from djistream.models.settings import DeviceModel, ImageStabilization, Resolution, StreamSettings
from djistream.protocol.constants import (
    DEFAULT_PAIR_PIN,
    MAX_PIN_BYTES,
    NOTIFY_CHARACTERISTIC,
    WRITE_CHARACTERISTIC,
    ProtocolConstants,
)
from djistream.session.state_machine import (
    ArmWatchdog,
    BatteryUpdated,
    CancelWatchdog,
    ConnectDevice,
    DeviceDiscovered,
    Effect,
    Event,
    NotificationReceived,
    ReleaseTransport,
    SendFrame,
    Session,
    SessionState,
    StartDiscovery,
    StartRequested,
    StateChanged,
    StopDiscovery,
    StopRequested,
    WatchdogExpired,
    transition,
)
from djistream.session.watchdog import WatchdogScheduler

if TYPE_CHECKING:
    from types import TracebackType

    from djistream.transport.abc import AbstractTransport

# Module logger
logger = logging.getLogger(__name__)

StateChangeCallback = Callable[["DjiDevice", SessionState], None]


def _validate_pin(pin: str) -> str:
    if len(pin.encode("utf-8")) > MAX_PIN_BYTES:
        raise ValueError(f"Pairing PIN must be at most {MAX_PIN_BYTES} bytes as UTF-8")
    return pin


class DjiDevice:
    """
    Client for one DJI camera.

    Attributes:
        address: Transport address of the camera.
        model: Camera model (None until identified from advertising data).
        state: Current session state.
        battery_percentage: Last reported battery level, None until streaming.
        pair_pin: PIN sent when pairing.
    """

    def __init__(
        self,
        address: str,
        transport: AbstractTransport,
        model: DeviceModel | None = None,
        *,
        pair_pin: str = DEFAULT_PAIR_PIN,
        start_timeout: float = ProtocolConstants.START_WATCHDOG_TIMEOUT,
        stop_timeout: float = ProtocolConstants.STOP_WATCHDOG_TIMEOUT,
        on_state_change: StateChangeCallback | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            address: Transport address of the camera.
            transport: Transport used for discovery and I/O.
            model: Camera model if already known from a scan.
            pair_pin: PIN sent with the Pair request.
            start_timeout: Seconds allowed to reach streaming.
            stop_timeout: Seconds allowed for a stop to be acknowledged.
            on_state_change: Called with (device, new_state) on every change.
        """
        self._transport = transport
        self._session = Session(
            address=address,
            model=model,
            pair_pin=_validate_pin(pair_pin),
            start_timeout=start_timeout,
            stop_timeout=stop_timeout,
        )
        self._on_state_change = on_state_change
        self._events: asyncio.Queue[Event] = asyncio.Queue()
        self._dispatcher: asyncio.Task[None] | None = None
        self._watchdogs = WatchdogScheduler(self._on_watchdog_expired)
        # Bumped on every transport release so callbacks from an earlier
        # connection cannot feed events into the current one.
        self._generation = 0

    @property
    def address(self) -> str:
        return self._session.address

    @property
    def model(self) -> DeviceModel | None:
        return self._session.model

    @property
    def state(self) -> SessionState:
        """Get the current session state."""
        return self._session.state

    @property
    def settings(self) -> StreamSettings | None:
        """Stream parameters from the last start request."""
        return self._session.settings

    @property
    def battery_percentage(self) -> int | None:
        return self._session.battery_percentage

    @property
    def is_streaming(self) -> bool:
        return self._session.state is SessionState.STREAMING

    @property
    def pair_pin(self) -> str:
        return self._session.pair_pin

    @pair_pin.setter
    def pair_pin(self, pin: str) -> None:
        self._session = replace(self._session, pair_pin=_validate_pin(pin))

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    @property
    def on_state_change(self) -> StateChangeCallback | None:
        return self._on_state_change

    @on_state_change.setter
    def on_state_change(self, callback: StateChangeCallback | None) -> None:
        self._on_state_change = callback

    async def start_live_stream(
        self,
        wifi_ssid: str,
        wifi_password: str,
        rtmp_url: str,
        resolution: Resolution = Resolution.R1080P,
        fps: int = 30,
        bitrate: int = 6_000_000,
        image_stabilization: ImageStabilization = ImageStabilization.ROCK_STEADY_PLUS,
    ) -> None:
        """
        Start a live stream.

        Captures the stream parameters, tears down any previous session and
        begins discovery. Progress is reported through on_state_change; the
        session reaches STREAMING or falls back to IDLE when the start
        watchdog expires.

        Args:
            wifi_ssid: Wi-Fi network the camera should join.
            wifi_password: Wi-Fi password.
            rtmp_url: Destination stream URL.
            resolution: Stream resolution.
            fps: Frame rate (25 or 30 have dedicated codes).
            bitrate: Bits per second.
            image_stabilization: Stabilization mode, applied on models that
                need a configuration step.

        Raises:
            pydantic.ValidationError: If the parameters cannot be encoded.
        """
        settings = StreamSettings(
            wifi_ssid=wifi_ssid,
            wifi_password=wifi_password,
            rtmp_url=rtmp_url,
            resolution=resolution,
            fps=fps,
            bitrate=bitrate,
            image_stabilization=image_stabilization,
        )
        model = self.model.display_name if self.model is not None else "unidentified camera"
        logger.info("Start live stream for %s at %s", model, self.address)
        await self._submit(StartRequested(settings))

    async def stop_live_stream(self) -> None:
        """
        Stop the live stream.

        Safe to call when idle (no-op).
        """
        await self._submit(StopRequested())

    async def drain(self) -> None:
        """
        Wait until every queued event has been handled.

        Raises:
            Exception: Whatever terminated the dispatcher, if it failed.
        """
        if self._dispatcher is None:
            return
        join = asyncio.ensure_future(self._events.join())
        done, _ = await asyncio.wait(
            {join, self._dispatcher},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if self._dispatcher in done:
            join.cancel()
            self._dispatcher.result()

    async def close(self) -> None:
        """
        Abandon the session and release the transport.

        The state is forced to IDLE without sending a stop request.
        """
        self._watchdogs.cancel_all()
        if self._dispatcher is not None:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
            self._dispatcher = None
        self._generation += 1
        await self._release_transport()
        if self._session.state is not SessionState.IDLE:
            self._apply_state_change(StateChanged(self._session.state, SessionState.IDLE))
        self._session = replace(
            self._session,
            state=SessionState.IDLE,
            pending_transaction_id=None,
            armed_watchdogs={},
            battery_percentage=None,
        )

    # ===== Event intake =====

    async def _submit(self, event: Event) -> None:
        self._post(event)
        await self.drain()

    def _post(self, event: Event) -> None:
        if self._dispatcher is None or self._dispatcher.done():
            self._dispatcher = asyncio.get_running_loop().create_task(self._dispatch_loop())
        self._events.put_nowait(event)

    def _on_watchdog_expired(self, name: str, token: int) -> None:
        self._post(WatchdogExpired(name, token))

    def _advertisement_handler(self, generation: int) -> Callable[[str, bytes | None], None]:
        def handle(address: str, manufacturer_data: bytes | None) -> None:
            if generation == self._generation:
                self._post(DeviceDiscovered(address, manufacturer_data))

        return handle

    def _notification_handler(self, generation: int) -> Callable[[str, bytes], None]:
        def handle(characteristic: str, data: bytes) -> None:
            if generation == self._generation:
                logger.debug("Received %s from characteristic %s", data.hex(), characteristic)
                self._post(NotificationReceived(characteristic, data))

        return handle

    async def _dispatch_loop(self) -> None:
        while True:
            event = await self._events.get()
            try:
                self._session, effects = transition(self._session, event)
                for effect in effects:
                    await self._apply(effect)
            finally:
                self._events.task_done()

    # ===== Effect execution =====

    async def _apply(self, effect: Effect) -> None:
        if isinstance(effect, StateChanged):
            self._apply_state_change(effect)
        elif isinstance(effect, SendFrame):
            await self._send(effect)
        elif isinstance(effect, ArmWatchdog):
            self._watchdogs.arm(effect.name, effect.seconds, effect.token)
        elif isinstance(effect, CancelWatchdog):
            self._watchdogs.cancel(effect.name)
        elif isinstance(effect, StartDiscovery):
            await self._start_discovery()
        elif isinstance(effect, StopDiscovery):
            await self._stop_discovery()
        elif isinstance(effect, ConnectDevice):
            await self._connect(effect.address)
        elif isinstance(effect, ReleaseTransport):
            self._generation += 1
            await self._release_transport()
        elif isinstance(effect, BatteryUpdated):
            logger.info("Battery percentage %s", effect.percentage)
        else:
            raise TypeError(f"Unsupported effect {effect!r}")

    def _apply_state_change(self, effect: StateChanged) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self, effect.new)

    async def _start_discovery(self) -> None:
        try:
            await self._transport.start_scan(self._advertisement_handler(self._generation))
        except TransportError as e:
            logger.error("Failed to start discovery: %s", e)

    async def _stop_discovery(self) -> None:
        try:
            await self._transport.stop_scan()
        except TransportError as e:
            logger.error("Failed to stop discovery: %s", e)

    async def _connect(self, address: str) -> None:
        generation = self._generation
        try:
            await self._transport.connect(address)
        except TransportError as e:
            logger.error("Connection error: %s", e)
            return
        logger.info("Connected to %s", address)

        try:
            services = await self._transport.discover_services()
        except TransportError as e:
            logger.error("Service discovery error: %s", e)
            return

        characteristics: set[str] = set()
        for service, chars in services.items():
            logger.debug("Discovered service %s", service)
            for char in chars:
                logger.debug("Discovered characteristic %s", char)
            characteristics.update(chars)

        missing = {NOTIFY_CHARACTERISTIC, WRITE_CHARACTERISTIC} - characteristics
        if missing:
            logger.error("Camera is missing characteristics %s", ", ".join(sorted(missing)))
            return

        try:
            await self._transport.start_notify(
                NOTIFY_CHARACTERISTIC, self._notification_handler(generation)
            )
        except TransportError as e:
            logger.error("Characteristic subscribe error: %s", e)
            return

        # The initial value is what moves CONNECTING on to the pair check.
        try:
            data = await self._transport.read(NOTIFY_CHARACTERISTIC)
        except TransportError as e:
            logger.error("Characteristic read error: %s", e)
            return
        if generation == self._generation:
            logger.debug("Read %s from characteristic %s", data.hex(), NOTIFY_CHARACTERISTIC)
            self._post(NotificationReceived(NOTIFY_CHARACTERISTIC, data))

    async def _send(self, effect: SendFrame) -> None:
        try:
            data = effect.frame.encode()
        except EncodeError as e:
            logger.error("Cannot encode %s request: %s", effect.request, e)
            return
        if not self._transport.is_connected:
            logger.debug("Not connected, dropping %s request", effect.request)
            return
        logger.debug("Sending %s request %s", effect.request, data.hex())
        try:
            await self._transport.write(WRITE_CHARACTERISTIC, data)
        except TransportError as e:
            logger.error("Failed to send %s request: %s", effect.request, e)

    async def _release_transport(self) -> None:
        try:
            await self._transport.stop_scan()
            await self._transport.disconnect()
        except TransportError as e:
            logger.error("Failed to release transport: %s", e)

    async def __aenter__(self) -> DjiDevice:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - abandon the session and release the transport."""
        await self.close()

    def __repr__(self) -> str:
        model = self.model.display_name if self.model is not None else "None"
        return f"DjiDevice(address={self.address}, model={model}, state={self.state.name})"
