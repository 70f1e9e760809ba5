"""Tests for DeviceScanner."""

import pytest

from djistream.models.settings import DeviceModel
from djistream.scanner import DeviceScanner, DiscoveredDevice

from helpers import OSMO_ACTION_3_ADVERTISEMENT, OSMO_ACTION_4_ADVERTISEMENT


class TestDeviceScanner:
    """Tests for scanning for cameras."""

    @pytest.mark.asyncio
    async def test_reports_dji_devices(self, transport):
        """Test DJI advertisements are collected with their model."""
        found = []
        scanner = DeviceScanner(transport, on_device_discovered=found.append)
        await scanner.start()
        assert scanner.is_scanning

        transport.advertise("AA:BB:CC:DD:EE:01", OSMO_ACTION_4_ADVERTISEMENT)
        transport.advertise("AA:BB:CC:DD:EE:02", OSMO_ACTION_3_ADVERTISEMENT)

        assert found == [
            DiscoveredDevice("AA:BB:CC:DD:EE:01", DeviceModel.OSMO_ACTION_4, OSMO_ACTION_4_ADVERTISEMENT),
            DiscoveredDevice("AA:BB:CC:DD:EE:02", DeviceModel.OSMO_ACTION_3, OSMO_ACTION_3_ADVERTISEMENT),
        ]
        assert scanner.discovered_devices == found
        await scanner.stop()
        assert not scanner.is_scanning

    @pytest.mark.asyncio
    async def test_ignores_other_manufacturers(self, transport):
        """Test non-DJI and empty advertisements are dropped."""
        scanner = DeviceScanner(transport)
        await scanner.start()
        transport.advertise("11:11:11:11:11:11", b"\x4c\x00\x02\x15")
        transport.advertise("22:22:22:22:22:22", None)
        transport.advertise("33:33:33:33:33:33", b"")
        assert scanner.discovered_devices == []

    @pytest.mark.asyncio
    async def test_reports_each_device_once(self, transport):
        """Test repeated advertisements are deduplicated by address."""
        found = []
        scanner = DeviceScanner(transport, on_device_discovered=found.append)
        await scanner.start()
        transport.advertise("AA:BB:CC:DD:EE:01", OSMO_ACTION_4_ADVERTISEMENT)
        transport.advertise("AA:BB:CC:DD:EE:01", OSMO_ACTION_4_ADVERTISEMENT)
        assert len(found) == 1

    @pytest.mark.asyncio
    async def test_unknown_model(self, transport):
        """Test unrecognized or short model codes are reported as unknown."""
        scanner = DeviceScanner(transport)
        await scanner.start()
        transport.advertise("AA:BB:CC:DD:EE:01", b"\xaa\x08\x99\x00")
        transport.advertise("AA:BB:CC:DD:EE:02", b"\xaa\x08")
        models = [device.model for device in scanner.discovered_devices]
        assert models == [DeviceModel.UNKNOWN, DeviceModel.UNKNOWN]
        assert scanner.discovered_devices[0].model_name == "Unknown"

    @pytest.mark.asyncio
    async def test_restart_clears_results(self, transport):
        """Test starting a new scan forgets earlier results."""
        scanner = DeviceScanner(transport)
        await scanner.start()
        transport.advertise("AA:BB:CC:DD:EE:01", OSMO_ACTION_4_ADVERTISEMENT)
        await scanner.stop()
        await scanner.start()
        assert scanner.discovered_devices == []

    @pytest.mark.asyncio
    async def test_async_context_manager(self, transport):
        """Test the context scans while open."""
        async with DeviceScanner(transport) as scanner:
            assert transport.is_scanning
            transport.advertise("AA:BB:CC:DD:EE:01", OSMO_ACTION_4_ADVERTISEMENT)
        assert not transport.is_scanning
        assert scanner.discovered_devices[0].model_name == "Osmo Action 4"
