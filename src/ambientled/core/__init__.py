"""Core strip update loop: smoothing, streaming and scheduling."""

from .capture import CaptureLoop, ColorSource, SolidColorSource
from .frames import Frame, apply_correction, as_frame, black_frame, blend_frame, solid_frame
from .pause import PauseFlag, pause_flag
from .strip_updater import (
    DEFAULT_BACKOFF,
    DISCONNECTED,
    Connected,
    ConnectionState,
    Disconnected,
    StripUpdater,
)
from .worker import StripWorker

__all__ = [
    "CaptureLoop",
    "ColorSource",
    "Connected",
    "ConnectionState",
    "DEFAULT_BACKOFF",
    "DISCONNECTED",
    "Disconnected",
    "Frame",
    "PauseFlag",
    "SolidColorSource",
    "StripUpdater",
    "StripWorker",
    "apply_correction",
    "as_frame",
    "black_frame",
    "blend_frame",
    "pause_flag",
    "solid_frame",
]
