"""Services: configuration store and directory watching."""

from .config_store import CONFIG_FILENAME, ConfigurationStore
from .watcher import ChangeEvent, ChangeType, DirectoryWatcher, PollingDirectoryWatcher

__all__ = [
    "CONFIG_FILENAME",
    "ChangeEvent",
    "ChangeType",
    "ConfigurationStore",
    "DirectoryWatcher",
    "PollingDirectoryWatcher",
]
