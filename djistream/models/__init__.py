"""
Data models for the DJI camera control protocol.

This module contains:

- Stream configuration enumerations (Resolution, ImageStabilization)
- Device model identification (DeviceModel, DeviceVariant)
- Validated stream settings (StreamSettings)
"""

from djistream.models.advertising import identify_model, is_dji_device, model_from_manufacturer_data
from djistream.models.settings import (
    SUPPORTED_BITRATES,
    SUPPORTED_FPS,
    DeviceModel,
    DeviceVariant,
    ImageStabilization,
    Resolution,
    StreamSettings,
)

__all__ = [
    # Enums
    "Resolution",
    "ImageStabilization",
    "DeviceModel",
    "DeviceVariant",
    # Settings
    "StreamSettings",
    "SUPPORTED_BITRATES",
    "SUPPORTED_FPS",
    # Advertising
    "is_dji_device",
    "model_from_manufacturer_data",
    "identify_model",
]
