"""
Frame encoding and decoding.

Every message on the wire is one frame:

    Offset  Size  Field
    0       1     Sync byte (0x55)
    1       1     Total frame length (13 + payload length)
    2       1     Version (0x04)
    3       1     CRC-8 over bytes 0..2
    4       2     Target (little-endian)
    6       2     Transaction id (little-endian)
    8       3     Command type (little-endian)
    11      n     Payload
    11+n    2     CRC-16 over bytes 0..10+n (little-endian)

Decoding checks, in order: sync byte, declared length, version, header
checksum, frame checksum. Each failure raises its own DecodeError subclass.
"""

from __future__ import annotations

from dataclasses import dataclass

from djistream.exceptions import (
    FrameChecksumError,
    FrameTooLargeError,
    HeaderChecksumError,
    LengthMismatchError,
    SyncByteError,
    TruncatedFrameError,
    VersionError,
)
from djistream.protocol.checksums import crc8, crc16
from djistream.protocol.constants import ProtocolConstants


@dataclass(frozen=True)
class Frame:
    """
    One protocol message.

    Attributes:
        target: Logical endpoint id (16-bit).
        transaction_id: Correlates a request with its response (16-bit).
        command_type: Protocol operation code (24-bit).
        payload: Command-specific bytes.
    """

    target: int
    transaction_id: int
    command_type: int
    payload: bytes = b""

    @property
    def size(self) -> int:
        """Encoded size of this frame in bytes."""
        return ProtocolConstants.FRAME_OVERHEAD + len(self.payload)

    def encode(self) -> bytes:
        """Encode this frame to wire bytes."""
        return encode_frame(self.target, self.transaction_id, self.command_type, self.payload)

    def __repr__(self) -> str:
        return (
            f"Frame(target=0x{self.target:04X}, id=0x{self.transaction_id:04X}, "
            f"type=0x{self.command_type:06X}, payload={self.payload.hex()})"
        )


def _check_range(name: str, value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} must fit in {bits} bits, got {value}")


def encode_frame(
    target: int,
    transaction_id: int,
    command_type: int,
    payload: bytes = b"",
) -> bytes:
    """
    Build a complete frame.

    Args:
        target: Logical endpoint id (0-0xFFFF).
        transaction_id: Transaction id (0-0xFFFF).
        command_type: Command type (0-0xFFFFFF).
        payload: Payload bytes, at most 242.

    Returns:
        Encoded frame bytes.

    Raises:
        ValueError: If a numeric field is out of range.
        FrameTooLargeError: If the frame would exceed 255 bytes.

    Example:
        >>> frame = encode_frame(0x0802, 0x8C12, 0xE10240, b"\\x1a")
        >>> frame[:3]
        b'U\\x0e\\x04'
    """
    _check_range("target", target, 16)
    _check_range("transaction_id", transaction_id, 16)
    _check_range("command_type", command_type, 24)

    size = ProtocolConstants.FRAME_OVERHEAD + len(payload)
    if size > ProtocolConstants.MAX_FRAME_SIZE:
        raise FrameTooLargeError(size, ProtocolConstants.MAX_FRAME_SIZE)

    header = bytes([ProtocolConstants.SYNC, size, ProtocolConstants.VERSION])
    body = bytearray(header)
    body.append(crc8(header))
    body += target.to_bytes(2, "little")
    body += transaction_id.to_bytes(2, "little")
    body += command_type.to_bytes(3, "little")
    body += payload
    body += crc16(body).to_bytes(2, "little")
    return bytes(body)


def decode_frame(data: bytes | bytearray | memoryview) -> Frame:
    """
    Parse and validate a complete frame.

    Args:
        data: Exactly one frame as received.

    Returns:
        The decoded Frame.

    Raises:
        TruncatedFrameError: Buffer too short to be a frame.
        SyncByteError: First byte is not 0x55.
        LengthMismatchError: Declared length differs from the buffer length.
        VersionError: Version byte is not 0x04.
        HeaderChecksumError: CRC-8 over the header does not match.
        FrameChecksumError: CRC-16 over the frame does not match.
    """
    data = bytes(data)

    if not data:
        raise TruncatedFrameError("Empty frame")
    if data[0] != ProtocolConstants.SYNC:
        raise SyncByteError(data[0])
    if len(data) < 2:
        raise TruncatedFrameError("Frame ends before length byte")

    declared = data[1]
    if declared != len(data):
        raise LengthMismatchError(declared, len(data))
    if len(data) < ProtocolConstants.FRAME_OVERHEAD:
        raise TruncatedFrameError(
            f"Frame of {len(data)} bytes is shorter than the "
            f"{ProtocolConstants.FRAME_OVERHEAD}-byte overhead"
        )

    if data[2] != ProtocolConstants.VERSION:
        raise VersionError(data[2])

    expected_header = crc8(data[: ProtocolConstants.HEADER_CRC_SPAN])
    if data[3] != expected_header:
        raise HeaderChecksumError(expected=expected_header, received=data[3])

    checksum_offset = len(data) - ProtocolConstants.CHECKSUM_SIZE
    expected_crc = crc16(data[:checksum_offset])
    received_crc = int.from_bytes(data[checksum_offset:], "little")
    if received_crc != expected_crc:
        raise FrameChecksumError(expected=expected_crc, received=received_crc)

    c = ProtocolConstants
    return Frame(
        target=int.from_bytes(data[c.TARGET_OFFSET : c.TRANSACTION_ID_OFFSET], "little"),
        transaction_id=int.from_bytes(data[c.TRANSACTION_ID_OFFSET : c.COMMAND_TYPE_OFFSET], "little"),
        command_type=int.from_bytes(data[c.COMMAND_TYPE_OFFSET : c.PAYLOAD_OFFSET], "little"),
        payload=data[c.PAYLOAD_OFFSET : checksum_offset],
    )
