"""
Transport layer for DJI camera communication.

This package provides transport implementations for discovering and
talking to cameras over Bluetooth Low Energy.

Available transports:
- BleakTransport: BLE central using bleak
- MockTransport: Mock transport for testing without hardware

Example:
    >>> from djistream.transport import BleakTransport
    >>> async with BleakTransport() as transport:
    ...     await transport.connect("AA:BB:CC:DD:EE:FF")

Testing Example:
    >>> from djistream.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.set_response_callback(lambda frame: None)
"""

from djistream.transport.abc import AbstractTransport
from djistream.transport.bleak_transport import BleakTransport
from djistream.transport.mock import MockTransport

__all__ = [
    "AbstractTransport",
    "BleakTransport",
    "MockTransport",
]
