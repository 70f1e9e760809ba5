"""
BLE transport using bleak.

This module provides the primary transport implementation for talking to
cameras from a Bluetooth Low Energy central (Linux BlueZ, macOS, Windows).

bleak reports manufacturer data as a mapping of company identifier to the
bytes that follow it. The transport re-attaches the 2-byte little-endian
company identifier so model identification sees the raw advertising layout.

Example:
    >>> transport = BleakTransport()
    >>> async with transport:
    ...     await transport.connect("AA:BB:CC:DD:EE:FF")
    ...     await transport.write("fff5", frame)
"""

from __future__ import annotations

import asyncio
import logging

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError
from bleak.uuids import normalize_uuid_str

from djistream.exceptions import ConnectionError, TransportError
from djistream.protocol.constants import DJI_COMPANY_ID
from djistream.transport.abc import AbstractTransport, AdvertisementCallback, NotificationCallback

logger = logging.getLogger(__name__)

_BLUETOOTH_BASE_UUID_SUFFIX = "-0000-1000-8000-00805f9b34fb"

DEFAULT_CONNECT_TIMEOUT = 10.0


def short_uuid(uuid: str) -> str:
    """
    Reduce a Bluetooth base UUID to its 16-bit short identifier.

    Example:
        >>> short_uuid("0000fff4-0000-1000-8000-00805f9b34fb")
        'fff4'
    """
    uuid = uuid.lower()
    if uuid.startswith("0000") and uuid.endswith(_BLUETOOTH_BASE_UUID_SUFFIX):
        return uuid[4:8]
    return uuid


def manufacturer_bytes(advertisement: AdvertisementData) -> bytes | None:
    """
    Rebuild raw manufacturer data from a bleak advertisement.

    Prefers the DJI entry when several companies are present.
    """
    data = advertisement.manufacturer_data
    if not data:
        return None
    company_id = DJI_COMPANY_ID if DJI_COMPANY_ID in data else next(iter(data))
    return company_id.to_bytes(2, "little") + bytes(data[company_id])


class BleakTransport(AbstractTransport):
    """
    BLE transport backed by bleak.

    Devices seen during scanning are cached so connect() can use the
    BLEDevice object, which avoids a second scan on most backends.

    Attributes:
        is_connected: Whether a device connection is open.
        is_scanning: Whether discovery is running.
    """

    def __init__(self, connect_timeout: float = DEFAULT_CONNECT_TIMEOUT) -> None:
        """
        Initialize the transport.

        Args:
            connect_timeout: Seconds allowed for a connection attempt.
        """
        self._connect_timeout = connect_timeout
        self._scanner: BleakScanner | None = None
        self._client: BleakClient | None = None
        self._devices: dict[str, BLEDevice] = {}

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    @property
    def is_scanning(self) -> bool:
        return self._scanner is not None

    async def start_scan(self, callback: AdvertisementCallback) -> None:
        await self.stop_scan()

        def detected(device: BLEDevice, advertisement: AdvertisementData) -> None:
            self._devices[device.address] = device
            callback(device.address, manufacturer_bytes(advertisement))

        scanner = BleakScanner(detection_callback=detected)
        try:
            await scanner.start()
        except (BleakError, OSError) as e:
            raise TransportError(f"Failed to start scanning: {e}") from e
        self._scanner = scanner
        logger.debug("Scanning started")

    async def stop_scan(self) -> None:
        scanner, self._scanner = self._scanner, None
        if scanner is None:
            return
        try:
            await scanner.stop()
        except (BleakError, OSError) as e:
            logger.debug("Error stopping scanner: %s", e)
        logger.debug("Scanning stopped")

    async def connect(self, address: str) -> None:
        await self.disconnect()
        target = self._devices.get(address, address)
        client = BleakClient(target, timeout=self._connect_timeout)
        try:
            await client.connect()
        except (BleakError, asyncio.TimeoutError, OSError) as e:
            raise ConnectionError(f"Failed to connect to {address}: {e}") from e
        self._client = client
        logger.debug("Connected to %s", address)

    async def disconnect(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.disconnect()
        except (BleakError, OSError) as e:
            logger.debug("Error during disconnect: %s", e)

    async def discover_services(self) -> dict[str, list[str]]:
        client = self._require_client()
        try:
            services = client.services
        except BleakError as e:
            raise ConnectionError(f"Service discovery failed: {e}") from e
        return {
            service.uuid: [short_uuid(char.uuid) for char in service.characteristics]
            for service in services
        }

    async def start_notify(self, characteristic: str, callback: NotificationCallback) -> None:
        client = self._require_client()

        def handler(_sender: object, data: bytearray) -> None:
            callback(characteristic, bytes(data))

        try:
            await client.start_notify(normalize_uuid_str(characteristic), handler)
        except (BleakError, OSError) as e:
            raise TransportError(f"Failed to subscribe to {characteristic}: {e}") from e

    async def write(self, characteristic: str, data: bytes) -> None:
        client = self._require_client()
        try:
            await client.write_gatt_char(normalize_uuid_str(characteristic), data, response=False)
        except (BleakError, OSError) as e:
            raise TransportError(f"Failed to write {characteristic}: {e}") from e

    async def read(self, characteristic: str) -> bytes:
        client = self._require_client()
        try:
            return bytes(await client.read_gatt_char(normalize_uuid_str(characteristic)))
        except (BleakError, OSError) as e:
            raise TransportError(f"Failed to read {characteristic}: {e}") from e

    def _require_client(self) -> BleakClient:
        if self._client is None or not self._client.is_connected:
            raise TransportError("Not connected")
        return self._client
