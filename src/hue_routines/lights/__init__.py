"""Hue light control modules."""

from .bridge import HueBridge, LightController, MockBridge
from .color import (
    ColorPreview,
    ColorSpec,
    color_temperature_to_xy,
    color_to_xy,
    hex_to_linear_rgb,
    hs_to_xy,
    interpolate_color,
    preview_color,
    resolve_device_color,
    rgb_to_xy,
    xy_to_preview_hex,
)
from .command import CommandResult, DeviceCommand, LightReading

__all__ = [
    "HueBridge",
    "LightController",
    "MockBridge",
    "ColorPreview",
    "ColorSpec",
    "color_temperature_to_xy",
    "color_to_xy",
    "hex_to_linear_rgb",
    "hs_to_xy",
    "interpolate_color",
    "preview_color",
    "resolve_device_color",
    "rgb_to_xy",
    "xy_to_preview_hex",
    "CommandResult",
    "DeviceCommand",
    "LightReading",
]
