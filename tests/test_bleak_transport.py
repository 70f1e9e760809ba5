"""Tests for the bleak transport helpers."""

from types import SimpleNamespace

import pytest

from djistream.exceptions import TransportError
from djistream.transport.bleak_transport import BleakTransport, manufacturer_bytes, short_uuid


class TestShortUuid:
    """Tests for UUID shortening."""

    def test_base_uuid(self):
        assert short_uuid("0000fff4-0000-1000-8000-00805f9b34fb") == "fff4"

    def test_uppercase(self):
        assert short_uuid("0000FFF5-0000-1000-8000-00805F9B34FB") == "fff5"

    def test_vendor_uuid_unchanged(self):
        uuid = "6e400001-b5a3-f393-e0a9-e50e24dcca9e"
        assert short_uuid(uuid) == uuid


class TestManufacturerBytes:
    """Tests for rebuilding raw manufacturer data."""

    def test_reattaches_company_id(self):
        advertisement = SimpleNamespace(manufacturer_data={0x08AA: b"\x14\x00\x01"})
        assert manufacturer_bytes(advertisement) == b"\xaa\x08\x14\x00\x01"

    def test_prefers_dji_entry(self):
        advertisement = SimpleNamespace(manufacturer_data={0x004C: b"\x02\x15", 0x08AA: b"\x12\x00"})
        assert manufacturer_bytes(advertisement) == b"\xaa\x08\x12\x00"

    def test_other_company(self):
        advertisement = SimpleNamespace(manufacturer_data={0x004C: b"\x02\x15"})
        assert manufacturer_bytes(advertisement) == b"\x4c\x00\x02\x15"

    def test_no_manufacturer_data(self):
        assert manufacturer_bytes(SimpleNamespace(manufacturer_data={})) is None


class TestBleakTransport:
    """Tests for BleakTransport without a Bluetooth adapter."""

    def test_initial_state(self):
        transport = BleakTransport()
        assert not transport.is_connected
        assert not transport.is_scanning

    @pytest.mark.asyncio
    async def test_write_when_disconnected_raises(self):
        with pytest.raises(TransportError):
            await BleakTransport().write("fff5", b"\x55")

    @pytest.mark.asyncio
    async def test_read_when_disconnected_raises(self):
        with pytest.raises(TransportError):
            await BleakTransport().read("fff4")

    @pytest.mark.asyncio
    async def test_discover_services_when_disconnected_raises(self):
        with pytest.raises(TransportError):
            await BleakTransport().discover_services()

    @pytest.mark.asyncio
    async def test_disconnect_and_stop_scan_idempotent(self):
        transport = BleakTransport()
        await transport.stop_scan()
        await transport.disconnect()
        await transport.close()
        assert not transport.is_connected
