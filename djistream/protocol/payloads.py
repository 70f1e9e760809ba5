"""
Payload encoders for each request kind.

Each encoder is a pure function from its parameters to payload bytes. Fixed
byte groups come from djistream.protocol.constants; variable parts are
strings, enumerated codes and little-endian integers.

Strings are packed as a 1-byte length followed by UTF-8 bytes. The stream
URL is packed with a 2-byte length field whose high byte is always zero.
"""

from __future__ import annotations

from typing import Final

from djistream.models.settings import DeviceVariant, ImageStabilization, Resolution
from djistream.protocol.constants import (
    CONFIGURE_INFIX,
    CONFIGURE_PREFIX,
    MAX_STRING_BYTES,
    PAIR_TOKEN,
    PREPARE_TO_STREAM_PAYLOAD,
    START_STREAMING_INFIX,
    START_STREAMING_PRE_FPS,
    START_STREAMING_PRE_URL,
    START_STREAMING_PREFIX,
    STOP_STREAMING_PAYLOAD,
)

RESOLUTION_CODES: Final[dict[Resolution, int]] = {
    Resolution.R480P: 0x47,
    Resolution.R720P: 0x04,
    Resolution.R1080P: 0x0A,
}

FPS_CODES: Final[dict[int, int]] = {
    25: 2,
    30: 3,
}
FPS_FALLBACK_CODE: Final[int] = 0

STABILIZATION_CODES: Final[dict[ImageStabilization, int]] = {
    ImageStabilization.OFF: 0,
    ImageStabilization.ROCK_STEADY: 1,
    ImageStabilization.HORIZON_STEADY: 2,
    ImageStabilization.ROCK_STEADY_PLUS: 3,
    ImageStabilization.HORIZON_BALANCING: 4,
}

CONFIGURE_VARIANT_BYTES: Final[dict[DeviceVariant, int]] = {
    DeviceVariant.STANDARD: 0x08,
    DeviceVariant.ALTERNATE: 0x1A,
}

START_STREAMING_VARIANT_BYTES: Final[dict[DeviceVariant, int]] = {
    DeviceVariant.STANDARD: 0x2E,
    DeviceVariant.ALTERNATE: 0x2A,
}


def pack_string(value: str) -> bytes:
    """
    Pack a string as a 1-byte length followed by its UTF-8 bytes.

    Raises:
        ValueError: If the UTF-8 form is longer than 255 bytes.

    Example:
        >>> pack_string("love")
        b'\\x04love'
    """
    data = value.encode("utf-8")
    if len(data) > MAX_STRING_BYTES:
        raise ValueError(f"String of {len(data)} bytes does not fit a 1-byte length")
    return bytes([len(data)]) + data


def pack_url(url: str) -> bytes:
    """
    Pack a URL behind a 2-byte length field.

    Only the low byte carries the length; the high byte is always zero,
    which is what the cameras expect.

    Raises:
        ValueError: If the UTF-8 form is longer than 255 bytes.
    """
    data = url.encode("utf-8")
    if len(data) > MAX_STRING_BYTES:
        raise ValueError(f"URL of {len(data)} bytes does not fit the length field")
    return bytes([len(data), 0x00]) + data


def encode_pair(pin: str) -> bytes:
    """Authentication token followed by the length-prefixed pairing PIN."""
    return PAIR_TOKEN + pack_string(pin)


def encode_stop_streaming() -> bytes:
    return STOP_STREAMING_PAYLOAD


def encode_prepare_to_stream() -> bytes:
    return PREPARE_TO_STREAM_PAYLOAD


def encode_setup_wifi(ssid: str, password: str) -> bytes:
    """Length-prefixed SSID followed by length-prefixed password."""
    return pack_string(ssid) + pack_string(password)


def encode_configure(
    image_stabilization: ImageStabilization,
    variant: DeviceVariant = DeviceVariant.STANDARD,
) -> bytes:
    """
    Encode the image stabilization configuration.

    Layout:
        [01 01][VARIANT][00 01][STABILIZATION]
    """
    return (
        CONFIGURE_PREFIX
        + bytes([CONFIGURE_VARIANT_BYTES[variant]])
        + CONFIGURE_INFIX
        + bytes([STABILIZATION_CODES[ImageStabilization(image_stabilization)]])
    )


def fps_code(fps: int) -> int:
    """Map a frame rate to its wire code; unsupported rates map to 0."""
    return FPS_CODES.get(fps, FPS_FALLBACK_CODE)


def encode_start_streaming(
    rtmp_url: str,
    resolution: Resolution,
    fps: int,
    bitrate_kbps: int,
    variant: DeviceVariant = DeviceVariant.STANDARD,
) -> bytes:
    """
    Encode the start streaming request.

    Layout:
        [00][VARIANT][00][RESOLUTION][KBPS:2 LE][02 00][FPS][00 00 00][URL_LEN 00][URL...]

    Args:
        rtmp_url: Destination stream URL.
        resolution: Stream resolution.
        fps: Frame rate; only 25 and 30 have dedicated codes.
        bitrate_kbps: Bitrate in kilobits per second (0-65535).
        variant: Hardware encoding convention.

    Raises:
        ValueError: If the bitrate does not fit 16 bits or the URL is too long.
    """
    if not 0 <= bitrate_kbps <= 0xFFFF:
        raise ValueError(f"Bitrate must be 0-65535 kbps, got {bitrate_kbps}")

    return (
        START_STREAMING_PREFIX
        + bytes([START_STREAMING_VARIANT_BYTES[variant]])
        + START_STREAMING_INFIX
        + bytes([RESOLUTION_CODES[Resolution(resolution)]])
        + bitrate_kbps.to_bytes(2, "little")
        + START_STREAMING_PRE_FPS
        + bytes([fps_code(fps)])
        + START_STREAMING_PRE_URL
        + pack_url(rtmp_url)
    )
