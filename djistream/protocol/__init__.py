"""
Protocol layer for DJI camera communication.

This module contains the low-level protocol handling:
- Request identity triples and protocol constants
- Header CRC-8 and frame CRC-16
- Frame encoding and decoding

Payload encoders live in djistream.protocol.payloads.
"""

from djistream.protocol.checksums import crc8, crc16
from djistream.protocol.constants import ProtocolConstants, Requests, RequestSpec
from djistream.protocol.frame import Frame, decode_frame, encode_frame

__all__ = [
    # Constants
    "ProtocolConstants",
    "Requests",
    "RequestSpec",
    # Checksums
    "crc8",
    "crc16",
    # Frames
    "Frame",
    "encode_frame",
    "decode_frame",
]
