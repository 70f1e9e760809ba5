"""Shared constants and frame builders for djistream tests."""

from __future__ import annotations

from djistream.protocol.constants import ALREADY_PAIRED, Requests
from djistream.protocol.frame import decode_frame, encode_frame

DEVICE_ADDRESS = "AA:BB:CC:DD:EE:FF"
OSMO_ACTION_4_ADVERTISEMENT = bytes([0xAA, 0x08, 0x14, 0x00, 0x01, 0x02])
OSMO_ACTION_3_ADVERTISEMENT = bytes([0xAA, 0x08, 0x12, 0x00])


def reply_to(request: bytes, payload: bytes = b"") -> bytes:
    """Build a response frame echoing the addressing of `request`."""
    frame = decode_frame(request)
    return encode_frame(frame.target, frame.transaction_id, frame.command_type, payload)


def make_responder(pair_payload: bytes = ALREADY_PAIRED):
    """Answer every request with a matching response; Pair gets `pair_payload`."""

    def respond(data: bytes) -> bytes:
        frame = decode_frame(data)
        if frame.transaction_id == Requests.PAIR.transaction_id:
            return reply_to(data, pair_payload)
        return reply_to(data)

    return respond
