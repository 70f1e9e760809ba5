"""
Exception hierarchy for djistream.

All exceptions inherit from DjiStreamError, providing a clean hierarchy
for error handling. The design follows these principles:

1. Frame codec errors (encoding, decoding, checksums) are distinct from
   transport errors
2. Every decode rejection has its own class so callers can tell them apart
3. Checksum errors carry the expected and received values for debugging
"""

from __future__ import annotations


class DjiStreamError(Exception):
    """
    Base exception for all djistream errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all djistream errors with a single except clause.
    """

    pass


class ProtocolError(DjiStreamError):
    """
    Protocol-level error.

    Raised when a frame cannot be built or does not follow the wire format.
    """

    pass


class EncodeError(ProtocolError):
    """Raised when a frame cannot be encoded."""

    pass


class FrameTooLargeError(EncodeError):
    """
    Frame does not fit the 8-bit length field.

    The protocol has no fragmentation, so a frame longer than 255 bytes
    (a payload longer than 242 bytes) cannot be sent at all.
    """

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Frame size {size} exceeds maximum of {limit} bytes")
        self.size = size
        self.limit = limit


class DecodeError(ProtocolError):
    """
    Frame decoding error.

    Raised when received bytes are not a valid frame. A decode error is
    fatal to that single frame only.
    """

    pass


class TruncatedFrameError(DecodeError):
    """Buffer is too short to hold a complete frame."""

    pass


class SyncByteError(DecodeError):
    """First byte of the frame is not the sync byte."""

    def __init__(self, received: int) -> None:
        super().__init__(f"Bad sync byte 0x{received:02X}")
        self.received = received


class LengthMismatchError(DecodeError):
    """Declared frame length does not match the number of bytes received."""

    def __init__(self, declared: int, actual: int) -> None:
        super().__init__(f"Declared length {declared} does not match actual length {actual}")
        self.declared = declared
        self.actual = actual


class VersionError(DecodeError):
    """Frame carries an unsupported protocol version byte."""

    def __init__(self, received: int) -> None:
        super().__init__(f"Unsupported protocol version 0x{received:02X}")
        self.received = received


class ChecksumError(DecodeError):
    """
    Checksum validation failure.

    Raised when a received frame's checksum doesn't match the calculated value.
    This typically indicates data corruption during transmission.
    """

    def __init__(
        self,
        message: str = "Checksum validation failed",
        *,
        expected: int | None = None,
        received: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        base = super().__str__()
        if self.expected is not None and self.received is not None:
            return f"{base} (expected 0x{self.expected:02X}, got 0x{self.received:02X})"
        return base


class HeaderChecksumError(ChecksumError):
    """CRC-8 over the frame header does not match."""

    def __init__(self, *, expected: int, received: int) -> None:
        super().__init__("Header checksum mismatch", expected=expected, received=received)


class FrameChecksumError(ChecksumError):
    """CRC-16 over the whole frame does not match."""

    def __init__(self, *, expected: int, received: int) -> None:
        super().__init__("Frame checksum mismatch", expected=expected, received=received)


class TransportError(DjiStreamError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Bluetooth adapter errors
    - Write or subscribe failures
    - Operations on a transport that is not connected
    """

    pass


class ConnectionError(TransportError):  # noqa: A001 - intentionally shadows builtin
    """
    Device connection error.

    Raised when:
    - The device cannot be connected
    - Service or characteristic discovery fails
    - A required characteristic is missing
    """

    pass
