"""Tests for MockTransport."""

import pytest

from djistream.exceptions import ConnectionError, TransportError
from djistream.transport.mock import MockTransport


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.mark.asyncio
    async def test_connect_disconnect(self, transport):
        """Test connecting and disconnecting."""
        assert not transport.is_connected
        await transport.connect("AA:BB")
        assert transport.is_connected
        assert transport.connected_address == "AA:BB"
        await transport.disconnect()
        assert not transport.is_connected
        assert transport.connected_address is None

    @pytest.mark.asyncio
    async def test_connect_error(self, transport):
        """Test configured connect failures raise ConnectionError."""
        transport.set_connect_error(OSError("out of range"))
        with pytest.raises(ConnectionError):
            await transport.connect("AA:BB")
        assert not transport.is_connected
        assert transport.connect_attempts == ["AA:BB"]

    @pytest.mark.asyncio
    async def test_connect_error_cleared(self, transport):
        """Test clearing the connect error lets connect succeed."""
        transport.set_connect_error(OSError())
        transport.set_connect_error(None)
        await transport.connect("AA:BB")
        assert transport.is_connected

    @pytest.mark.asyncio
    async def test_write_records_data(self, transport):
        """Test that write records data."""
        await transport.connect("AA:BB")
        await transport.write("fff5", b"hello")
        await transport.write("fff5", b"world")
        assert transport.written_data == [b"hello", b"world"]
        assert transport.last_written == b"world"

    @pytest.mark.asyncio
    async def test_written_data_only_request_characteristic(self, transport):
        """Test written_data filters to the request characteristic."""
        await transport.connect("AA:BB")
        await transport.write("fff3", b"other")
        await transport.write("fff5", b"frame")
        assert transport.written_data == [b"frame"]
        assert transport.writes == [("fff3", b"other"), ("fff5", b"frame")]

    @pytest.mark.asyncio
    async def test_write_when_disconnected_raises(self, transport):
        """Test that writing without a connection raises."""
        with pytest.raises(TransportError):
            await transport.write("fff5", b"test")

    @pytest.mark.asyncio
    async def test_discover_services(self, transport):
        """Test the default service table."""
        await transport.connect("AA:BB")
        assert await transport.discover_services() == {"fff0": ["fff4", "fff5"]}

    @pytest.mark.asyncio
    async def test_discover_services_when_disconnected_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.discover_services()

    @pytest.mark.asyncio
    async def test_custom_services(self):
        """Test a custom service table is reported."""
        transport = MockTransport(services={"180f": ["2a19"]})
        await transport.connect("AA:BB")
        assert await transport.discover_services() == {"180f": ["2a19"]}

    @pytest.mark.asyncio
    async def test_scan_delivers_advertisements(self, transport):
        """Test advertisements reach the scan callback only while scanning."""
        seen = []
        transport.advertise("AA:BB", b"\xaa\x08")
        await transport.start_scan(lambda address, data: seen.append((address, data)))
        assert transport.is_scanning
        transport.advertise("AA:BB", b"\xaa\x08")
        await transport.stop_scan()
        transport.advertise("CC:DD", b"\xaa\x08")
        assert seen == [("AA:BB", b"\xaa\x08")]
        assert not transport.is_scanning

    @pytest.mark.asyncio
    async def test_notify_requires_subscription(self, transport):
        """Test notifications reach subscribed characteristics only."""
        received = []
        await transport.connect("AA:BB")
        transport.notify("fff4", b"early")
        await transport.start_notify("fff4", lambda char, data: received.append((char, data)))
        transport.notify("fff4", b"late")
        transport.notify("fff3", b"other")
        assert received == [("fff4", b"late")]
        assert transport.subscriptions == ["fff4"]

    @pytest.mark.asyncio
    async def test_start_notify_when_disconnected_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.start_notify("fff4", lambda char, data: None)

    @pytest.mark.asyncio
    async def test_read(self, transport):
        """Test reads return the configured value and are recorded."""
        await transport.connect("AA:BB")
        assert await transport.read("fff4") == b""
        transport.set_read_value("fff4", b"\x01\x02")
        assert await transport.read("fff4") == b"\x01\x02"
        assert transport.reads == ["fff4", "fff4"]
        transport.clear()
        assert transport.reads == []

    @pytest.mark.asyncio
    async def test_read_when_disconnected_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.read("fff4")
        assert transport.reads == []

    @pytest.mark.asyncio
    async def test_disconnect_drops_subscriptions(self, transport):
        """Test disconnecting removes notification subscriptions."""
        received = []
        await transport.connect("AA:BB")
        await transport.start_notify("fff4", lambda char, data: received.append(data))
        await transport.disconnect()
        transport.notify("fff4", b"late")
        assert received == []
        assert transport.subscriptions == []

    @pytest.mark.asyncio
    async def test_response_callback(self, transport):
        """Test writes are answered on the notify characteristic."""
        received = []
        await transport.connect("AA:BB")
        await transport.start_notify("fff4", lambda char, data: received.append((char, data)))
        transport.set_response_callback(lambda data: data[::-1])
        await transport.write("fff5", b"\x01\x02")
        assert received == [("fff4", b"\x02\x01")]

    @pytest.mark.asyncio
    async def test_response_callback_multiple(self, transport):
        """Test a callback can answer with several notifications or none."""
        received = []
        await transport.connect("AA:BB")
        await transport.start_notify("fff4", lambda char, data: received.append(data))
        transport.set_response_callback(lambda data: [b"one", b"two"] if data == b"x" else None)
        await transport.write("fff5", b"x")
        await transport.write("fff5", b"y")
        assert received == [b"one", b"two"]

    @pytest.mark.asyncio
    async def test_clear(self, transport):
        """Test clearing recorded writes."""
        await transport.connect("AA:BB")
        await transport.write("fff5", b"test")
        transport.clear()
        assert transport.written_data == []
        assert transport.last_written is None

    @pytest.mark.asyncio
    async def test_assert_written(self, transport):
        """Test write assertions."""
        await transport.connect("AA:BB")
        await transport.write("fff5", b"first")
        await transport.write("fff5", b"second")
        transport.assert_written(b"second")
        transport.assert_written(b"first", index=0)
        transport.assert_write_count(2)
        with pytest.raises(AssertionError):
            transport.assert_written(b"other")
        with pytest.raises(AssertionError):
            transport.assert_write_count(3)

    def test_assert_written_empty(self, transport):
        with pytest.raises(AssertionError):
            transport.assert_written(b"anything")

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        """Test leaving the context disconnects."""
        async with MockTransport() as transport:
            await transport.connect("AA:BB")
        assert not transport.is_connected
