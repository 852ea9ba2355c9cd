"""Data models for ambientled."""

from .color import Color, lerp_channel
from .config import MAX_BRIGHTNESS, Configuration, Segment, Strip
from .enums import Orientation, StripType

__all__ = [
    # Models
    "Color",
    "Configuration",
    "Segment",
    "Strip",
    # Enums
    "Orientation",
    "StripType",
    # Helpers
    "MAX_BRIGHTNESS",
    "lerp_channel",
]
