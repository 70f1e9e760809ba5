"""Shared fixtures for djistream tests."""

import pytest

from djistream.models.settings import ImageStabilization, Resolution, StreamSettings
from djistream.transport.mock import MockTransport


@pytest.fixture
def settings() -> StreamSettings:
    """Stream settings used across scenario tests."""
    return StreamSettings(
        wifi_ssid="Home",
        wifi_password="secret123",
        rtmp_url="rtmp://example.com/live",
        resolution=Resolution.R1080P,
        fps=30,
        bitrate=6_000_000,
        image_stabilization=ImageStabilization.ROCK_STEADY_PLUS,
    )


@pytest.fixture
def transport() -> MockTransport:
    """Connected-capable mock transport exposing fff4 and fff5."""
    return MockTransport()
