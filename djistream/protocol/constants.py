"""
DJI camera control protocol constants.

Request identity triples (target, transaction id, command type) and the fixed
payload byte groups must match what the cameras expect byte for byte.
"""

from __future__ import annotations

from typing import Final, NamedTuple


class RequestSpec(NamedTuple):
    """Fixed addressing for one kind of request."""

    name: str
    target: int
    transaction_id: int
    command_type: int


class Requests:
    """Static table of request kinds the client can send."""

    PAIR: Final = RequestSpec("pair", 0x0702, 0x8092, 0x450740)
    STOP_STREAMING: Final = RequestSpec("stop-streaming", 0x0802, 0xEAC8, 0x8E0240)
    PREPARE_TO_STREAM: Final = RequestSpec("prepare-to-stream", 0x0802, 0x8C12, 0xE10240)
    SETUP_WIFI: Final = RequestSpec("setup-wifi", 0x0702, 0x8C19, 0x470740)
    CONFIGURE: Final = RequestSpec("configure", 0x0102, 0x8C2D, 0x8E0240)
    START_STREAMING: Final = RequestSpec("start-streaming", 0x0802, 0x8C2C, 0x780840)

    ALL: Final[tuple[RequestSpec, ...]] = (
        PAIR,
        STOP_STREAMING,
        PREPARE_TO_STREAM,
        SETUP_WIFI,
        CONFIGURE,
        START_STREAMING,
    )


class ProtocolConstants:
    """
    Frame layout and session timing constants.

    Frame layout (13 bytes of overhead):
        [SYNC][LEN][VER][CRC8][TARGET:2][TXID:2][TYPE:3][PAYLOAD...][CRC16:2]
    """

    SYNC: Final[int] = 0x55
    VERSION: Final[int] = 0x04

    HEADER_SIZE: Final[int] = 4
    """Sync, length, version and header checksum."""

    HEADER_CRC_SPAN: Final[int] = 3
    """Number of leading bytes covered by the header checksum."""

    FRAME_OVERHEAD: Final[int] = 13
    MAX_FRAME_SIZE: Final[int] = 0xFF
    MAX_PAYLOAD_SIZE: Final[int] = MAX_FRAME_SIZE - FRAME_OVERHEAD

    TARGET_OFFSET: Final[int] = 4
    TRANSACTION_ID_OFFSET: Final[int] = 6
    COMMAND_TYPE_OFFSET: Final[int] = 8
    PAYLOAD_OFFSET: Final[int] = 11
    CHECKSUM_SIZE: Final[int] = 2

    # Watchdogs (seconds)
    START_WATCHDOG_TIMEOUT: Final[float] = 60.0
    STOP_WATCHDOG_TIMEOUT: Final[float] = 10.0


# ===== GATT characteristics (16-bit short identifiers) =====

NOTIFY_CHARACTERISTIC: Final[str] = "fff4"
"""Primary control characteristic; responses arrive here as notifications."""

WRITE_CHARACTERISTIC: Final[str] = "fff5"
"""Request channel; encoded frames are written here."""

# ===== Payload constant groups =====

PAIR_TOKEN: Final[bytes] = bytes([
    0x20, 0x32, 0x38, 0x34, 0x61, 0x65, 0x35, 0x62, 0x38, 0x64, 0x37, 0x36,
    0x62, 0x33, 0x33, 0x37, 0x35, 0x61, 0x30, 0x34, 0x61, 0x36, 0x34, 0x31,
    0x37, 0x61, 0x64, 0x37, 0x31, 0x62, 0x65, 0x61, 0x33,
])
"""33-byte authentication token sent ahead of the pairing PIN."""

STOP_STREAMING_PAYLOAD: Final[bytes] = bytes([0x01, 0x01, 0x1A, 0x00, 0x01, 0x02])
PREPARE_TO_STREAM_PAYLOAD: Final[bytes] = bytes([0x1A])

CONFIGURE_PREFIX: Final[bytes] = bytes([0x01, 0x01])
CONFIGURE_INFIX: Final[bytes] = bytes([0x00, 0x01])

START_STREAMING_PREFIX: Final[bytes] = bytes([0x00])
START_STREAMING_INFIX: Final[bytes] = bytes([0x00])
START_STREAMING_PRE_FPS: Final[bytes] = bytes([0x02, 0x00])
START_STREAMING_PRE_URL: Final[bytes] = bytes([0x00, 0x00, 0x00])

# ===== Responses =====

ALREADY_PAIRED: Final[bytes] = bytes([0x00, 0x01])
"""Pair response payload sent by a camera that already trusts this client."""

BATTERY_STATUS_TYPE: Final[int] = 0x020D00
"""Telemetry command type carrying the battery percentage."""

BATTERY_PERCENTAGE_OFFSET: Final[int] = 20

# ===== Pairing =====

DEFAULT_PAIR_PIN: Final[str] = "love"

# ===== Size limits derived from the frame layout =====

MAX_PIN_BYTES: Final[int] = ProtocolConstants.MAX_PAYLOAD_SIZE - len(PAIR_TOKEN) - 1
"""Longest UTF-8 PIN that still fits a single Pair frame (208)."""

MAX_URL_BYTES: Final[int] = ProtocolConstants.MAX_PAYLOAD_SIZE - 14
"""Longest UTF-8 URL that still fits a single Start-Streaming frame (228)."""

MAX_STRING_BYTES: Final[int] = 0xFF
"""Upper bound for any 1-byte length-prefixed string."""

# ===== Advertising =====

DJI_COMPANY_ID: Final[int] = 0x08AA
"""Bluetooth SIG company identifier; appears as AA 08 on the wire."""

DJI_MANUFACTURER_PREFIX: Final[bytes] = bytes([0xAA, 0x08])
