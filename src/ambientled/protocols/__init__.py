"""Protocol definitions for observers and events."""

from .events import ConfigEvent, TransportEvent
from .observers import ConfigCallback, ConfigObserver, TransportObserver

__all__ = [
    # Events
    "ConfigEvent",
    "TransportEvent",
    # Observers
    "ConfigCallback",
    "ConfigObserver",
    "TransportObserver",
]
