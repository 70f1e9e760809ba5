"""
Session layer: the pure state machine and its watchdog timers.
"""

from djistream.session.state_machine import (
    START_WATCHDOG,
    STOP_WATCHDOG,
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

__all__ = [
    "Session",
    "SessionState",
    "transition",
    "START_WATCHDOG",
    "STOP_WATCHDOG",
    "WatchdogScheduler",
    # Events
    "Event",
    "StartRequested",
    "StopRequested",
    "DeviceDiscovered",
    "NotificationReceived",
    "WatchdogExpired",
    # Effects
    "Effect",
    "StateChanged",
    "StartDiscovery",
    "StopDiscovery",
    "ConnectDevice",
    "SendFrame",
    "ArmWatchdog",
    "CancelWatchdog",
    "ReleaseTransport",
    "BatteryUpdated",
]
