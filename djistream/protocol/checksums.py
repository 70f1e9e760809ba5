"""
CRC calculation for frame integrity.

Frames carry two checksums, both computed bit by bit without lookup tables
and both reflected (least-significant bit first on input and output):

- Header CRC-8: polynomial 0x31, initial value 0xEE, no output XOR, over the
  first three bytes of the frame (sync, length, version).
- Frame CRC-16: polynomial 0x1021, initial value 0x496C, no output XOR, over
  every byte of the frame except the trailing two checksum bytes.

Polynomial and initial value are given in their normal (unreflected) form.
The reflected algorithm shifts right, so both are bit-reversed before use.
"""

from __future__ import annotations

from typing import Final

HEADER_CRC_POLY: Final[int] = 0x31
HEADER_CRC_INIT: Final[int] = 0xEE

FRAME_CRC_POLY: Final[int] = 0x1021
FRAME_CRC_INIT: Final[int] = 0x496C


def reflect(value: int, width: int) -> int:
    """
    Reverse the low `width` bits of `value`.

    Example:
        >>> hex(reflect(0x31, 8))
        '0x8c'
    """
    result = 0
    for _ in range(width):
        result = (result << 1) | (value & 1)
        value >>= 1
    return result


def _reflected_crc(
    data: bytes | bytearray | memoryview,
    width: int,
    poly: int,
    init: int,
) -> int:
    rpoly = reflect(poly, width)
    crc = reflect(init, width)
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ rpoly
            else:
                crc >>= 1
    return crc


def crc8(data: bytes | bytearray | memoryview) -> int:
    """
    Calculate the header CRC-8.

    Args:
        data: Header bytes (sync, length, version).

    Returns:
        8-bit checksum value (0-255).

    Example:
        >>> hex(crc8(bytes([0x55, 0x0D, 0x04])))
        '0x33'
    """
    return _reflected_crc(data, 8, HEADER_CRC_POLY, HEADER_CRC_INIT)


def crc16(data: bytes | bytearray | memoryview) -> int:
    """
    Calculate the frame CRC-16.

    Args:
        data: Frame bytes, excluding the trailing checksum.

    Returns:
        16-bit checksum value (0-65535).
    """
    return _reflected_crc(data, 16, FRAME_CRC_POLY, FRAME_CRC_INIT)
