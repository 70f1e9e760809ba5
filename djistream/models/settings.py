"""
Pydantic models and enumerations for stream configuration.

Design principles:
- Stream settings are frozen (immutable) once captured
- Validation enforces what a single frame can carry, so a validated
  StreamSettings always encodes without a size error
- Device models are a closed enumeration with an explicit unknown fallback
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from djistream.protocol.constants import MAX_STRING_BYTES, MAX_URL_BYTES, ProtocolConstants

SUPPORTED_BITRATES: Final[tuple[int, ...]] = (12_000_000, 8_000_000, 6_000_000, 4_000_000, 2_000_000)
"""Bitrates (bits per second) known to work on the cameras."""

SUPPORTED_FPS: Final[tuple[int, ...]] = (25, 30)
"""Frame rates with a dedicated wire code; others are sent as 0."""

MAX_BITRATE: Final[int] = 0xFFFF * 1000
"""Bitrate is sent as 16-bit kbps."""


class Resolution(str, Enum):
    """Live stream resolutions."""

    R480P = "480p"
    R720P = "720p"
    R1080P = "1080p"


class ImageStabilization(str, Enum):
    """Image stabilization modes."""

    OFF = "Off"
    ROCK_STEADY = "RockSteady"
    ROCK_STEADY_PLUS = "RockSteady+"
    HORIZON_BALANCING = "HorizonBalancing"
    HORIZON_STEADY = "HorizonSteady"


class DeviceVariant(IntEnum):
    """Hardware encoding convention selected in Configure and Start-Streaming payloads."""

    STANDARD = 0
    ALTERNATE = 1


class DeviceModel(IntEnum):
    """Camera hardware models, identified from advertising data."""

    OSMO_ACTION_3 = 0
    OSMO_ACTION_4 = 1
    OSMO_POCKET_3 = 2
    UNKNOWN = 3

    @property
    def display_name(self) -> str:
        """Human-readable model name."""
        return _MODEL_NAMES[self]

    @property
    def requires_configuration(self) -> bool:
        """Whether image stabilization must be configured before streaming."""
        return self is DeviceModel.OSMO_ACTION_4

    @property
    def variant(self) -> DeviceVariant:
        """Encoding convention used in variant-dependent payloads."""
        return DeviceVariant.STANDARD


_MODEL_NAMES: Final[dict[DeviceModel, str]] = {
    DeviceModel.OSMO_ACTION_3: "Osmo Action 3",
    DeviceModel.OSMO_ACTION_4: "Osmo Action 4",
    DeviceModel.OSMO_POCKET_3: "Osmo Pocket 3",
    DeviceModel.UNKNOWN: "Unknown",
}


def _utf8_len(value: str) -> int:
    return len(value.encode("utf-8"))


class StreamSettings(BaseModel):
    """
    Parameters captured when a live stream is requested.

    Example:
        >>> settings = StreamSettings(
        ...     wifi_ssid="Home",
        ...     wifi_password="secret123",
        ...     rtmp_url="rtmp://example.com/live",
        ...     resolution=Resolution.R1080P,
        ...     fps=30,
        ...     bitrate=6_000_000,
        ...     image_stabilization=ImageStabilization.ROCK_STEADY_PLUS,
        ... )
        >>> settings.bitrate_kbps
        6000
    """

    model_config = ConfigDict(frozen=True)

    wifi_ssid: str = Field(description="Wi-Fi network the camera joins")
    wifi_password: str = Field(description="Wi-Fi password")
    rtmp_url: str = Field(description="Destination stream URL")
    resolution: Resolution = Resolution.R1080P
    fps: int = Field(default=30, gt=0, le=0xFF)
    bitrate: int = Field(default=6_000_000, gt=0, le=MAX_BITRATE, description="Bits per second")
    image_stabilization: ImageStabilization = ImageStabilization.ROCK_STEADY_PLUS

    @field_validator("wifi_ssid", "wifi_password")
    @classmethod
    def _check_string_length(cls, value: str) -> str:
        if _utf8_len(value) > MAX_STRING_BYTES:
            raise ValueError(f"must be at most {MAX_STRING_BYTES} bytes as UTF-8")
        return value

    @field_validator("rtmp_url")
    @classmethod
    def _check_url_length(cls, value: str) -> str:
        if _utf8_len(value) > MAX_URL_BYTES:
            raise ValueError(f"must be at most {MAX_URL_BYTES} bytes as UTF-8")
        return value

    @model_validator(mode="after")
    def _check_wifi_payload(self) -> StreamSettings:
        size = 2 + _utf8_len(self.wifi_ssid) + _utf8_len(self.wifi_password)
        if size > ProtocolConstants.MAX_PAYLOAD_SIZE:
            raise ValueError(
                f"Wi-Fi credentials need {size} bytes, "
                f"limit is {ProtocolConstants.MAX_PAYLOAD_SIZE}"
            )
        return self

    @property
    def bitrate_kbps(self) -> int:
        """Bitrate in kilobits per second, as sent on the wire."""
        return self.bitrate // 1000

    @property
    def has_wifi_credentials(self) -> bool:
        """Whether both SSID and password are present."""
        return bool(self.wifi_ssid) and bool(self.wifi_password)
