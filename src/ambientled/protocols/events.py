"""Domain events for observer pattern.

- Transport events: connection state changes of a strip updater
- Config events: configuration snapshots published by the store
"""

from enum import Enum


class TransportEvent(Enum):
    """Events from a strip updater's transport."""

    CONNECTED = "connected"        # Transport opened, strip is live
    DISCONNECTED = "disconnected"  # Transport closed on purpose (pause, shutdown)
    FAILED = "failed"              # Write/flush/open failed, reconnect pending


class ConfigEvent(Enum):
    """Events from configuration reloads."""

    CONFIG_LOADED = "config_loaded"    # New snapshot accepted
    CONFIG_REJECTED = "config_rejected"  # File changed but failed to parse
