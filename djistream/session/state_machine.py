"""
Session state machine for a single camera.

The machine is a pure function:

    transition(session, event) -> (new_session, effects)

Sessions and events are immutable. Effects describe what the caller must do
(send a frame, arm a watchdog, connect, notify listeners); the DjiDevice
driver executes them against a transport. This keeps every transition
testable without Bluetooth hardware.

Happy path:
    IDLE -> DISCOVERING -> CONNECTING -> CHECKING_PAIRED -> [PAIRING] ->
    CLEANING_UP -> PREPARING_STREAM -> SETTING_UP_WIFI -> [CONFIGURING] ->
    STARTING_STREAM -> STREAMING

Stop:
    any non-idle state -> STOPPING_STREAM -> IDLE

Either watchdog expiring resets the session to IDLE.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Final, Union

from djistream.exceptions import DecodeError
from djistream.models.advertising import identify_model
from djistream.models.settings import DeviceModel, StreamSettings
from djistream.protocol.constants import (
    ALREADY_PAIRED,
    BATTERY_PERCENTAGE_OFFSET,
    BATTERY_STATUS_TYPE,
    DEFAULT_PAIR_PIN,
    NOTIFY_CHARACTERISTIC,
    ProtocolConstants,
    Requests,
    RequestSpec,
)
from djistream.protocol.frame import Frame, decode_frame
from djistream.protocol.payloads import (
    encode_configure,
    encode_pair,
    encode_prepare_to_stream,
    encode_setup_wifi,
    encode_start_streaming,
    encode_stop_streaming,
)

# Module logger
logger = logging.getLogger(__name__)

START_WATCHDOG: Final[str] = "start-watchdog"
STOP_WATCHDOG: Final[str] = "stop-watchdog"


class SessionState(Enum):
    """Device interaction states."""

    IDLE = "idle"
    """No session in progress."""

    DISCOVERING = "discovering"
    """Scanning for the target camera."""

    CONNECTING = "connecting"
    """Connecting and waiting for the control characteristic to report."""

    CHECKING_PAIRED = "checkingPaired"
    """Pair request sent, waiting for its response."""

    PAIRING = "pairing"
    """Waiting for the user to confirm pairing on the camera."""

    CLEANING_UP = "cleaningUp"
    """Stopping any stream left over from a previous session."""

    PREPARING_STREAM = "preparingStream"
    SETTING_UP_WIFI = "settingUpWifi"
    CONFIGURING = "configuring"
    STARTING_STREAM = "startingStream"

    STREAMING = "streaming"
    """Live. Battery telemetry is tracked in this state."""

    STOPPING_STREAM = "stoppingStream"


# ===== Events =====


@dataclass(frozen=True)
class StartRequested:
    settings: StreamSettings


@dataclass(frozen=True)
class StopRequested:
    pass


@dataclass(frozen=True)
class DeviceDiscovered:
    address: str
    manufacturer_data: bytes | None = None


@dataclass(frozen=True)
class NotificationReceived:
    characteristic: str
    data: bytes


@dataclass(frozen=True)
class WatchdogExpired:
    name: str
    token: int


Event = Union[StartRequested, StopRequested, DeviceDiscovered, NotificationReceived, WatchdogExpired]

# ===== Effects =====


@dataclass(frozen=True)
class StateChanged:
    old: SessionState
    new: SessionState


@dataclass(frozen=True)
class StartDiscovery:
    pass


@dataclass(frozen=True)
class StopDiscovery:
    pass


@dataclass(frozen=True)
class ConnectDevice:
    address: str


@dataclass(frozen=True)
class SendFrame:
    request: str
    frame: Frame


@dataclass(frozen=True)
class ArmWatchdog:
    """Start the named timer; its expiry must echo `token`."""

    name: str
    seconds: float
    token: int


@dataclass(frozen=True)
class CancelWatchdog:
    name: str


@dataclass(frozen=True)
class ReleaseTransport:
    """Stop scanning, drop notification subscriptions and disconnect."""


@dataclass(frozen=True)
class BatteryUpdated:
    percentage: int | None


Effect = Union[
    StateChanged,
    StartDiscovery,
    StopDiscovery,
    ConnectDevice,
    SendFrame,
    ArmWatchdog,
    CancelWatchdog,
    ReleaseTransport,
    BatteryUpdated,
]


@dataclass(frozen=True)
class Session:
    """
    Everything known about one device interaction.

    Attributes:
        address: Transport identity of the target camera.
        model: Camera model; derived from advertising data when None.
        pair_pin: PIN sent with the Pair request.
        state: Current protocol state.
        settings: Stream parameters captured by the last start request.
        pending_transaction_id: Transaction id of the request awaiting a response.
        armed_watchdogs: Token of each watchdog currently running, by name.
        watchdog_serial: Last token handed out when arming a watchdog.
        battery_percentage: Last reported battery level, None until learned.
        start_timeout: Seconds allowed to reach STREAMING.
        stop_timeout: Seconds allowed for the stop to be acknowledged.
    """

    address: str
    model: DeviceModel | None = None
    pair_pin: str = DEFAULT_PAIR_PIN
    state: SessionState = SessionState.IDLE
    settings: StreamSettings | None = None
    pending_transaction_id: int | None = None
    armed_watchdogs: dict[str, int] = field(default_factory=dict)
    watchdog_serial: int = 0
    battery_percentage: int | None = None
    start_timeout: float = ProtocolConstants.START_WATCHDOG_TIMEOUT
    stop_timeout: float = ProtocolConstants.STOP_WATCHDOG_TIMEOUT


class _Step:
    """Accumulates session updates and effects for one transition."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.effects: list[Effect] = []

    def update(self, **changes) -> None:
        self.session = replace(self.session, **changes)

    def set_state(self, state: SessionState) -> None:
        old = self.session.state
        if old is state:
            return
        logger.info("State change %s -> %s", old.value, state.value)
        self.update(state=state)
        self.effects.append(StateChanged(old, state))

    def arm(self, name: str, seconds: float) -> None:
        token = self.session.watchdog_serial + 1
        armed = {**self.session.armed_watchdogs, name: token}
        self.update(armed_watchdogs=armed, watchdog_serial=token)
        self.effects.append(ArmWatchdog(name, seconds, token))

    def cancel(self, name: str) -> None:
        if name not in self.session.armed_watchdogs:
            return
        self.disarm(name)
        self.effects.append(CancelWatchdog(name))

    def disarm(self, name: str) -> None:
        armed = {key: token for key, token in self.session.armed_watchdogs.items() if key != name}
        self.update(armed_watchdogs=armed)

    def send(self, spec: RequestSpec, payload: bytes) -> None:
        frame = Frame(spec.target, spec.transaction_id, spec.command_type, payload)
        self.update(pending_transaction_id=spec.transaction_id)
        self.effects.append(SendFrame(spec.name, frame))

    def set_battery(self, percentage: int | None) -> None:
        if self.session.battery_percentage == percentage:
            return
        self.update(battery_percentage=percentage)
        self.effects.append(BatteryUpdated(percentage))

    def reset(self) -> None:
        for name in sorted(self.session.armed_watchdogs):
            self.cancel(name)
        self.effects.append(ReleaseTransport())
        self.update(pending_transaction_id=None)
        self.set_battery(None)
        self.set_state(SessionState.IDLE)

    def result(self) -> tuple[Session, tuple[Effect, ...]]:
        return self.session, tuple(self.effects)


def transition(session: Session, event: Event) -> tuple[Session, tuple[Effect, ...]]:
    """
    Apply one event to a session.

    Args:
        session: Current session.
        event: Event to handle.

    Returns:
        Tuple of (new_session, effects). Effects must be executed in order.
    """
    step = _Step(session)

    if isinstance(event, StartRequested):
        _start(step, event)
    elif isinstance(event, StopRequested):
        _stop(step)
    elif isinstance(event, DeviceDiscovered):
        _discovered(step, event)
    elif isinstance(event, NotificationReceived):
        _notification(step, event)
    elif isinstance(event, WatchdogExpired):
        _watchdog_expired(step, event)
    else:
        raise TypeError(f"Unsupported event {event!r}")

    return step.result()


def _start(step: _Step, event: StartRequested) -> None:
    settings = event.settings
    logger.info(
        "Start live stream with resolution %s, fps %d, bitrate %d, image stabilization %s",
        settings.resolution.value,
        settings.fps,
        settings.bitrate,
        settings.image_stabilization.value,
    )
    step.reset()
    step.update(settings=settings)
    step.arm(START_WATCHDOG, step.session.start_timeout)
    step.effects.append(StartDiscovery())
    step.set_state(SessionState.DISCOVERING)


def _stop(step: _Step) -> None:
    if step.session.state is SessionState.IDLE:
        return
    logger.info("Stop live stream")
    step.cancel(START_WATCHDOG)
    step.arm(STOP_WATCHDOG, step.session.stop_timeout)
    step.send(Requests.STOP_STREAMING, encode_stop_streaming())
    step.set_state(SessionState.STOPPING_STREAM)


def _discovered(step: _Step, event: DeviceDiscovered) -> None:
    session = step.session
    if session.state is not SessionState.DISCOVERING:
        return
    if event.address.casefold() != session.address.casefold():
        return
    if not event.manufacturer_data:
        return

    if session.model is None:
        model = identify_model(event.manufacturer_data)
        logger.info("Identified %s as %s", event.address, model.display_name)
        step.update(model=model)

    step.effects.append(StopDiscovery())
    # Restarted so connecting gets the full start timeout.
    step.arm(START_WATCHDOG, session.start_timeout)
    step.set_state(SessionState.CONNECTING)
    step.effects.append(ConnectDevice(event.address))


def _watchdog_expired(step: _Step, event: WatchdogExpired) -> None:
    if step.session.armed_watchdogs.get(event.name) != event.token:
        logger.debug("Ignoring stale %s (token %d)", event.name, event.token)
        return
    logger.warning("%s expired in state %s, resetting", event.name, step.session.state.value)
    step.disarm(event.name)
    step.reset()


def _notification(step: _Step, event: NotificationReceived) -> None:
    session = step.session

    if session.state is SessionState.CONNECTING and event.characteristic == NOTIFY_CHARACTERISTIC:
        logger.info("Attempting to pair")
        step.send(Requests.PAIR, encode_pair(session.pair_pin))
        step.set_state(SessionState.CHECKING_PAIRED)
        return

    if not event.data:
        logger.info("Received empty message")
        return

    try:
        frame = decode_frame(event.data)
    except DecodeError as e:
        logger.warning("Error parsing message %s: %s", event.data.hex(), e)
        return
    logger.debug("Received %r", frame)

    handler = _RESPONSE_HANDLERS.get(session.state)
    if handler is None:
        logger.warning("Received message in unexpected state '%s'", session.state.value)
        return
    handler(step, frame)


def _session_model(step: _Step) -> DeviceModel:
    model = step.session.model
    return DeviceModel.UNKNOWN if model is None else model


def _is_pending(step: _Step, frame: Frame) -> bool:
    if frame.transaction_id == step.session.pending_transaction_id:
        return True
    logger.debug(
        "Ignoring response 0x%04X while waiting for 0x%04X",
        frame.transaction_id,
        step.session.pending_transaction_id or 0,
    )
    return False


def _on_checking_paired(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    if frame.payload == ALREADY_PAIRED:
        _on_pairing(step, frame)
    else:
        step.set_state(SessionState.PAIRING)


def _on_pairing(step: _Step, _frame: Frame) -> None:
    """Any message while pairing means the user accepted on the camera."""
    step.send(Requests.STOP_STREAMING, encode_stop_streaming())
    step.set_state(SessionState.CLEANING_UP)


def _on_cleaning_up(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    step.send(Requests.PREPARE_TO_STREAM, encode_prepare_to_stream())
    step.set_state(SessionState.PREPARING_STREAM)


def _on_preparing_stream(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    settings = step.session.settings
    if settings is None or not settings.has_wifi_credentials:
        logger.warning("No Wi-Fi credentials, cannot set up Wi-Fi")
        return
    step.send(Requests.SETUP_WIFI, encode_setup_wifi(settings.wifi_ssid, settings.wifi_password))
    step.set_state(SessionState.SETTING_UP_WIFI)


def _on_setting_up_wifi(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    model = _session_model(step)
    settings = step.session.settings
    if model.requires_configuration and settings is not None:
        step.send(Requests.CONFIGURE, encode_configure(settings.image_stabilization, model.variant))
        step.set_state(SessionState.CONFIGURING)
    else:
        _send_start_streaming(step)


def _on_configuring(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    _send_start_streaming(step)


def _send_start_streaming(step: _Step) -> None:
    settings = step.session.settings
    if settings is None or not settings.rtmp_url:
        logger.warning("No stream URL, cannot start streaming")
        return
    model = _session_model(step)
    payload = encode_start_streaming(
        settings.rtmp_url,
        settings.resolution,
        settings.fps,
        settings.bitrate_kbps,
        model.variant,
    )
    step.send(Requests.START_STREAMING, payload)
    step.set_state(SessionState.STARTING_STREAM)


def _on_starting_stream(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    step.update(pending_transaction_id=None)
    step.set_state(SessionState.STREAMING)
    step.cancel(START_WATCHDOG)


def _on_streaming(step: _Step, frame: Frame) -> None:
    if frame.command_type != BATTERY_STATUS_TYPE:
        return
    if len(frame.payload) > BATTERY_PERCENTAGE_OFFSET:
        step.set_battery(frame.payload[BATTERY_PERCENTAGE_OFFSET])


def _on_stopping_stream(step: _Step, frame: Frame) -> None:
    if not _is_pending(step, frame):
        return
    logger.info("Live stream stopped")
    step.reset()


_RESPONSE_HANDLERS = {
    SessionState.CHECKING_PAIRED: _on_checking_paired,
    SessionState.PAIRING: _on_pairing,
    SessionState.CLEANING_UP: _on_cleaning_up,
    SessionState.PREPARING_STREAM: _on_preparing_stream,
    SessionState.SETTING_UP_WIFI: _on_setting_up_wifi,
    SessionState.CONFIGURING: _on_configuring,
    SessionState.STARTING_STREAM: _on_starting_stream,
    SessionState.STREAMING: _on_streaming,
    SessionState.STOPPING_STREAM: _on_stopping_stream,
}
