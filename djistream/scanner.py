"""
Discovery of nearby DJI cameras.

The scanner listens to advertisements, keeps those carrying the DJI company
identifier, and reports each camera once per scan together with its model.

Example:
    >>> scanner = DeviceScanner(BleakTransport())
    >>> scanner.on_device_discovered = lambda found: print(found.address, found.model_name)
    >>> async with scanner:
    ...     await asyncio.sleep(5)
    >>> scanner.discovered_devices
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from djistream.models.advertising import identify_model, is_dji_device
from djistream.models.settings import DeviceModel

if TYPE_CHECKING:
    from types import TracebackType

    from djistream.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredDevice:
    """A camera seen during scanning."""

    address: str
    model: DeviceModel
    manufacturer_data: bytes

    @property
    def model_name(self) -> str:
        return self.model.display_name


class DeviceScanner:
    """
    Scans for DJI cameras.

    Attributes:
        discovered_devices: Cameras found since the last start(), in order.
        on_device_discovered: Called once for each newly found camera.
    """

    def __init__(
        self,
        transport: AbstractTransport,
        on_device_discovered: Callable[[DiscoveredDevice], None] | None = None,
    ) -> None:
        self._transport = transport
        self.on_device_discovered = on_device_discovered
        self._devices: list[DiscoveredDevice] = []

    @property
    def discovered_devices(self) -> list[DiscoveredDevice]:
        return self._devices.copy()

    @property
    def is_scanning(self) -> bool:
        return self._transport.is_scanning

    async def start(self) -> None:
        """Clear previous results and begin scanning."""
        self._devices.clear()
        await self._transport.start_scan(self._on_advertisement)

    async def stop(self) -> None:
        await self._transport.stop_scan()

    def _on_advertisement(self, address: str, manufacturer_data: bytes | None) -> None:
        if not manufacturer_data or not is_dji_device(manufacturer_data):
            return
        if any(device.address == address for device in self._devices):
            return

        model = identify_model(manufacturer_data)
        logger.info(
            "Manufacturer data %s for %s, model %s",
            manufacturer_data.hex(),
            address,
            model.display_name,
        )
        device = DiscoveredDevice(address, model, bytes(manufacturer_data))
        self._devices.append(device)
        if self.on_device_discovered is not None:
            self.on_device_discovered(device)

    async def __aenter__(self) -> DeviceScanner:
        """Async context manager entry - starts scanning."""
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - stops scanning."""
        await self.stop()
