"""
Mock transport for testing.

This module provides a mock transport implementation that allows testing
the camera client without Bluetooth hardware. Tests drive discovery and
notifications explicitly, and every write is recorded for verification.

Example:
    >>> from djistream.transport import MockTransport
    >>>
    >>> mock = MockTransport()
    >>> mock.set_response_callback(lambda frame: reply_for(frame))
    >>> device = DjiDevice("AA:BB:CC:DD:EE:FF", mock, DeviceModel.OSMO_ACTION_4)
    >>> await device.start_live_stream(...)
    >>> mock.advertise("AA:BB:CC:DD:EE:FF", bytes([0xAA, 0x08, 0x14, 0x00]))
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable

from djistream.exceptions import ConnectionError, TransportError
from djistream.protocol.constants import NOTIFY_CHARACTERISTIC, WRITE_CHARACTERISTIC
from djistream.transport.abc import AbstractTransport, AdvertisementCallback, NotificationCallback

ResponseCallback = Callable[[bytes], "bytes | Iterable[bytes] | None"]


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without hardware.

    Attributes:
        written_data: All bytes written to the request characteristic.
        writes: All (characteristic, bytes) pairs written.
        reads: Characteristics read, in order.
        connect_attempts: Addresses passed to connect(), in order.

    Example:
        >>> mock = MockTransport()
        >>> await mock.connect("AA:BB")
        >>> await mock.start_notify("fff4", handler)
        >>> mock.notify("fff4", b"\\x55...")   # handler receives it
    """

    def __init__(
        self,
        services: dict[str, list[str]] | None = None,
    ) -> None:
        """
        Initialize the mock transport.

        Args:
            services: Service table reported by discover_services(). Defaults
                to one service carrying the notify and write characteristics.
        """
        self._services = services if services is not None else {
            "fff0": [NOTIFY_CHARACTERISTIC, WRITE_CHARACTERISTIC],
        }
        self._is_connected = False
        self._connected_address: str | None = None
        self._scan_callback: AdvertisementCallback | None = None
        self._subscriptions: dict[str, NotificationCallback] = {}
        self._writes: list[tuple[str, bytes]] = []
        self._reads: list[str] = []
        self._read_values: dict[str, bytes] = {}
        self._connect_attempts: list[str] = []
        self._connect_error: Exception | None = None
        self._response_callback: ResponseCallback | None = None

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    @property
    def is_scanning(self) -> bool:
        return self._scan_callback is not None

    @property
    def connected_address(self) -> str | None:
        return self._connected_address

    @property
    def subscriptions(self) -> list[str]:
        """Characteristics with an active notification subscription."""
        return list(self._subscriptions)

    @property
    def writes(self) -> list[tuple[str, bytes]]:
        return self._writes.copy()

    @property
    def reads(self) -> list[str]:
        return self._reads.copy()

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the request characteristic."""
        return [data for char, data in self._writes if char == WRITE_CHARACTERISTIC]

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._writes[-1][1] if self._writes else None

    @property
    def connect_attempts(self) -> list[str]:
        return self._connect_attempts.copy()

    def set_connect_error(self, error: Exception | None) -> None:
        """Make subsequent connect() calls raise `error` (None to succeed)."""
        self._connect_error = error

    def set_read_value(self, characteristic: str, data: bytes) -> None:
        """Set the value returned by read() for `characteristic` (default empty)."""
        self._read_values[characteristic] = bytes(data)

    def set_response_callback(self, callback: ResponseCallback | None) -> None:
        """
        Set a callback to answer writes with notifications.

        The callback receives each frame written to the request
        characteristic and returns the notification bytes to deliver on
        the notify characteristic (one payload, several, or None).

        Args:
            callback: Function that takes written bytes and returns responses.
        """
        self._response_callback = callback

    def clear(self) -> None:
        """Clear the recorded writes and reads."""
        self._writes.clear()
        self._reads.clear()

    # ===== Test drivers =====

    def advertise(self, address: str, manufacturer_data: bytes | None) -> None:
        """Deliver an advertisement if a scan is running."""
        if self._scan_callback is not None:
            self._scan_callback(address, manufacturer_data)

    def notify(self, characteristic: str, data: bytes) -> None:
        """Deliver a notification if the characteristic is subscribed."""
        callback = self._subscriptions.get(characteristic)
        if callback is not None:
            callback(characteristic, bytes(data))

    # ===== AbstractTransport =====

    async def start_scan(self, callback: AdvertisementCallback) -> None:
        self._scan_callback = callback

    async def stop_scan(self) -> None:
        self._scan_callback = None

    async def connect(self, address: str) -> None:
        self._connect_attempts.append(address)
        if self._connect_error is not None:
            raise ConnectionError(f"Failed to connect to {address}") from self._connect_error
        self._is_connected = True
        self._connected_address = address

    async def disconnect(self) -> None:
        self._is_connected = False
        self._connected_address = None
        self._subscriptions.clear()

    async def discover_services(self) -> dict[str, list[str]]:
        if not self._is_connected:
            raise ConnectionError("Mock transport not connected")
        return {uuid: list(chars) for uuid, chars in self._services.items()}

    async def start_notify(self, characteristic: str, callback: NotificationCallback) -> None:
        if not self._is_connected:
            raise TransportError("Mock transport not connected")
        self._subscriptions[characteristic] = callback

    async def read(self, characteristic: str) -> bytes:
        if not self._is_connected:
            raise TransportError("Mock transport not connected")
        self._reads.append(characteristic)
        return self._read_values.get(characteristic, b"")

    async def write(self, characteristic: str, data: bytes) -> None:
        """
        Record written data and optionally answer it.

        Raises:
            TransportError: If transport is not connected.
        """
        if not self._is_connected:
            raise TransportError("Mock transport not connected")

        self._writes.append((characteristic, bytes(data)))

        if self._response_callback and characteristic == WRITE_CHARACTERISTIC:
            response = self._response_callback(bytes(data))
            if response is None:
                return
            if isinstance(response, (bytes, bytearray)):
                response = [response]
            for item in response:
                self.notify(NOTIFY_CHARACTERISTIC, item)

    # ===== Assertions =====

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that specific data was written to the request characteristic.

        Args:
            expected: Expected bytes.
            index: Index in written_data list (-1 for last).

        Raises:
            AssertionError: If data doesn't match.
        """
        written = self.written_data
        if not written:
            raise AssertionError("No data written to mock transport")

        actual = written[index]
        if actual != expected:
            raise AssertionError(f"Written data mismatch: expected {expected!r}, got {actual!r}")

    def assert_write_count(self, expected: int) -> None:
        """
        Assert number of writes to the request characteristic.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self.written_data)
        if actual != expected:
            raise AssertionError(f"Write count mismatch: expected {expected}, got {actual}")
