"""
djistream - Python library for live streaming from DJI cameras over Bluetooth LE.

This library drives DJI Osmo cameras through pairing, Wi-Fi setup, image
stabilization configuration and RTMP live streaming, and reports battery
telemetry while streaming.

Example:
    >>> from djistream import DeviceModel, DjiDevice, Resolution
    >>> from djistream.transport import BleakTransport
    >>>
    >>> async def main():
    ...     device = DjiDevice("AA:BB:CC:DD:EE:FF", BleakTransport(), DeviceModel.OSMO_ACTION_4)
    ...     device.on_state_change = lambda dev, state: print(state.value)
    ...     await device.start_live_stream(
    ...         "Home", "secret123", "rtmp://example.com/live", Resolution.R1080P, 30, 6_000_000
    ...     )
"""

from djistream.exceptions import (
    ChecksumError,
    ConnectionError,
    DecodeError,
    DjiStreamError,
    EncodeError,
    FrameChecksumError,
    FrameTooLargeError,
    HeaderChecksumError,
    LengthMismatchError,
    ProtocolError,
    SyncByteError,
    TransportError,
    TruncatedFrameError,
    VersionError,
)
from djistream.models import (
    SUPPORTED_BITRATES,
    SUPPORTED_FPS,
    DeviceModel,
    DeviceVariant,
    ImageStabilization,
    Resolution,
    StreamSettings,
    is_dji_device,
    model_from_manufacturer_data,
)
from djistream.protocol import Frame, decode_frame, encode_frame
from djistream.session import SessionState
from djistream.device import DjiDevice
from djistream.scanner import DeviceScanner, DiscoveredDevice
from djistream.transport import AbstractTransport, BleakTransport, MockTransport

__version__ = "0.1.0"
__all__ = [
    # Client
    "DjiDevice",
    "SessionState",
    "DeviceScanner",
    "DiscoveredDevice",
    # Models
    "DeviceModel",
    "DeviceVariant",
    "Resolution",
    "ImageStabilization",
    "StreamSettings",
    "SUPPORTED_BITRATES",
    "SUPPORTED_FPS",
    "is_dji_device",
    "model_from_manufacturer_data",
    # Frames
    "Frame",
    "encode_frame",
    "decode_frame",
    # Exceptions
    "DjiStreamError",
    "ProtocolError",
    "EncodeError",
    "FrameTooLargeError",
    "DecodeError",
    "TruncatedFrameError",
    "SyncByteError",
    "LengthMismatchError",
    "VersionError",
    "ChecksumError",
    "HeaderChecksumError",
    "FrameChecksumError",
    "TransportError",
    "ConnectionError",
    # Transport
    "AbstractTransport",
    "BleakTransport",
    "MockTransport",
    # Version
    "__version__",
]
