"""
Abstract transport interface for BLE camera communication.

This module defines the abstract base class for all transport implementations.
Transports handle discovery of nearby cameras and the GATT connection used to
exchange frames.

The transport layer is responsible for:
- Scanning and reporting advertisements
- Connecting and disconnecting by device address
- Enumerating services and characteristics
- Subscribing to notifications, reading and writing raw bytes

Characteristics are addressed by their 16-bit short identifier
(e.g. "fff4"). Requests are written to one characteristic and responses
arrive as notifications on another.

Implementations:
- BleakTransport: bleak based BLE central
- MockTransport: For testing without hardware
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from types import TracebackType

AdvertisementCallback = Callable[[str, "bytes | None"], None]
"""Receives (address, manufacturer_data) for each advertisement seen."""

NotificationCallback = Callable[[str, bytes], None]
"""Receives (characteristic, data) for each notification."""


class AbstractTransport(ABC):
    """
    Abstract base class for camera transports.

    Transports support async context manager protocol for safe resource
    management:

        async with BleakTransport() as transport:
            await transport.connect(address)
            await transport.write("fff5", frame)

    Attributes:
        is_connected: Whether a device connection is currently open.
        is_scanning: Whether discovery is running.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """
        Check if a device connection is currently open.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def is_scanning(self) -> bool:
        """Check if discovery is running."""
        ...

    @abstractmethod
    async def start_scan(self, callback: AdvertisementCallback) -> None:
        """
        Begin discovery.

        Args:
            callback: Called for every advertisement received. Manufacturer
                data includes the 2-byte company identifier, or is None when
                the advertisement carries none.

        Raises:
            TransportError: If scanning cannot be started.
        """
        ...

    @abstractmethod
    async def stop_scan(self) -> None:
        """
        Stop discovery.

        Safe to call when not scanning (idempotent).
        """
        ...

    @abstractmethod
    async def connect(self, address: str) -> None:
        """
        Connect to a device.

        Args:
            address: Device address as reported during discovery.

        Raises:
            ConnectionError: If the device cannot be connected.
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Close the device connection.

        Drops every notification subscription. Safe to call multiple times
        (idempotent).
        """
        ...

    @abstractmethod
    async def discover_services(self) -> dict[str, list[str]]:
        """
        Enumerate services and their characteristics.

        Returns:
            Mapping of service UUID to the short identifiers of its
            characteristics.

        Raises:
            ConnectionError: If discovery fails or the transport is not connected.
        """
        ...

    @abstractmethod
    async def start_notify(self, characteristic: str, callback: NotificationCallback) -> None:
        """
        Subscribe to notifications on a characteristic.

        Args:
            characteristic: Short identifier of the characteristic.
            callback: Called with (characteristic, data) for every notification.

        Raises:
            TransportError: If the subscription fails.
        """
        ...

    @abstractmethod
    async def read(self, characteristic: str) -> bytes:
        """
        Read the current value of a characteristic.

        Args:
            characteristic: Short identifier of the characteristic.

        Returns:
            The characteristic value.

        Raises:
            TransportError: If not connected or the read fails.
        """
        ...

    @abstractmethod
    async def write(self, characteristic: str, data: bytes) -> None:
        """
        Write raw bytes to a characteristic.

        Args:
            characteristic: Short identifier of the characteristic.
            data: Bytes to send, normally one complete frame.

        Raises:
            TransportError: If the transport is not connected or write fails.
        """
        ...

    async def close(self) -> None:
        """Stop scanning and disconnect."""
        await self.stop_scan()
        await self.disconnect()

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - stops scanning and disconnects."""
        await self.close()
