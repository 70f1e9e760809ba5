"""
Device model identification from BLE manufacturer data.

Manufacturer data layout:
    [AA 08][MODEL:2][...]

The first two bytes are the DJI company identifier (0x08AA, little-endian),
the next two identify the camera model.
"""

from __future__ import annotations

from typing import Final

from djistream.models.settings import DeviceModel
from djistream.protocol.constants import DJI_MANUFACTURER_PREFIX

MODEL_CODES: Final[dict[bytes, DeviceModel]] = {
    bytes([0x12, 0x00]): DeviceModel.OSMO_ACTION_3,
    bytes([0x14, 0x00]): DeviceModel.OSMO_ACTION_4,
    bytes([0x20, 0x00]): DeviceModel.OSMO_POCKET_3,
}


def is_dji_device(manufacturer_data: bytes) -> bool:
    """Check whether manufacturer data carries the DJI company identifier."""
    return manufacturer_data[:2] == DJI_MANUFACTURER_PREFIX


def model_from_manufacturer_data(manufacturer_data: bytes) -> DeviceModel | None:
    """
    Identify the camera model.

    Args:
        manufacturer_data: Raw manufacturer data including the company id.

    Returns:
        The model, UNKNOWN for unrecognized codes, or None if the data is
        too short to carry a model code.

    Example:
        >>> model_from_manufacturer_data(bytes([0xAA, 0x08, 0x14, 0x00]))
        <DeviceModel.OSMO_ACTION_4: 1>
    """
    if len(manufacturer_data) < 4:
        return None
    return MODEL_CODES.get(bytes(manufacturer_data[2:4]), DeviceModel.UNKNOWN)


def identify_model(manufacturer_data: bytes) -> DeviceModel:
    """Like model_from_manufacturer_data, but short data maps to UNKNOWN."""
    model = model_from_manufacturer_data(manufacturer_data)
    return DeviceModel.UNKNOWN if model is None else model
