"""ambientled: drive LED strips so their colors track a region of the display."""

__version__ = "0.1.0"

from .app import AmbientLedApp
from .core import StripUpdater, StripWorker, pause_flag
from .services import ConfigurationStore
from .transport import open_transport

__all__ = [
    "AmbientLedApp",
    "ConfigurationStore",
    "StripUpdater",
    "StripWorker",
    "open_transport",
    "pause_flag",
]
