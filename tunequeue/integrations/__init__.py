"""Catalog and playback device adapters for tunequeue."""

from .contracts import (
    BlacklistSource,
    CatalogError,
    CatalogSearch,
    DeviceCommandError,
    PlaybackDevice,
    device_error_code,
)

__all__ = [
    "BlacklistSource",
    "CatalogError",
    "CatalogSearch",
    "DeviceCommandError",
    "PlaybackDevice",
    "device_error_code",
]
