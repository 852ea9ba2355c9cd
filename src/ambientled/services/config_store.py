"""Hot-reloading configuration store."""

import logging
import threading
import time
from pathlib import Path
from typing import Any, Optional

from ambientled.exceptions import ConfigurationError
from ambientled.models import Configuration
from ambientled.protocols import ConfigCallback, ConfigEvent, ConfigObserver
from ambientled.utils import ObserverManager, PydanticPersistence

from .watcher import DEFAULT_POLL_INTERVAL, ChangeType, DirectoryWatcher, PollingDirectoryWatcher

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

# Rejected snapshots are re-offered immediately a few times, then with a
# growing delay so a busy callback does not keep a core spinning.
ACCEPT_YIELD_ATTEMPTS = 3
ACCEPT_BASE_DELAY = 0.005
ACCEPT_MAX_DELAY = 0.1


class ConfigurationStore:
    """
    Loads ``config.json`` and republishes it whenever the file changes.

    Every successfully parsed file becomes a new immutable
    ``Configuration`` snapshot that is handed to ``callback`` until the
    callback returns True. Files that fail to parse are logged and
    ignored; the previously accepted snapshot stays current.

    Threading:
        The watch loop runs on a dedicated daemon thread named
        "Configuration Watcher". ``callback`` is invoked from that thread
        (and from the constructor's thread for the initial load), never
        concurrently with itself.

    Usage Example:
        ```python
        def apply(config: Configuration) -> bool:
            ...
            return True

        with ConfigurationStore(apply, directory=Path.cwd()) as store:
            print(store.current)
        ```
    """

    def __init__(
        self,
        callback: ConfigCallback,
        directory: Optional[Path] = None,
        filename: str = CONFIG_FILENAME,
        watcher: Optional[DirectoryWatcher] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Register the watch, load the current file and start watching.

        Args:
            callback: Receives each new snapshot, returns True once applied
            directory: Directory holding the config file (default: working directory)
            filename: Name of the config file inside ``directory``
            watcher: Custom directory watcher (default: polling watcher)
            poll_interval: Poll interval for the default watcher

        Raises:
            WatchSetupError: If the directory cannot be watched
        """
        self._callback = callback
        self._watcher = watcher or PollingDirectoryWatcher(
            Path.cwd() if directory is None else Path(directory), poll_interval
        )
        self.path = self._watcher.directory / filename

        self._lock = threading.Lock()
        self._reload_lock = threading.Lock()
        self._current: Optional[Configuration] = None
        self._stop = threading.Event()
        self._observers = ObserverManager[ConfigObserver](observer_type_name="config")

        self.reload()

        self._thread = threading.Thread(target=self._watch, name="Configuration Watcher", daemon=True)
        self._thread.start()
        logger.info(f"ConfigurationStore watching {self.path}")

    # =================================================================
    # Event System
    # =================================================================

    def register_observer(self, observer: ConfigObserver) -> None:
        """Register an observer to receive configuration events."""
        self._observers.register(observer)

    def unregister_observer(self, observer: ConfigObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _notify_observers(self, event: ConfigEvent, **kwargs: Any) -> None:
        self._observers.notify("on_config_event", event, **kwargs)

    # =================================================================
    # Configuration Access
    # =================================================================

    @property
    def current(self) -> Optional[Configuration]:
        """The last accepted snapshot, or None before the first one."""
        with self._lock:
            return self._current

    @property
    def is_closed(self) -> bool:
        """True once close() has been called."""
        return self._stop.is_set()

    def reload(self) -> bool:
        """
        Read, parse and publish the config file.

        Returns:
            True if a new snapshot was accepted, False if the file is
            missing, failed to parse, or the store was closed while the
            callback was still deferring

        Events:
            Emits CONFIG_LOADED with ``config`` on success and
            CONFIG_REJECTED with ``error`` on parse failure
        """
        with self._reload_lock:
            try:
                config = PydanticPersistence.load_json(self.path, Configuration)
            except FileNotFoundError:
                logger.debug(f"No configuration file at {self.path}")
                return False
            except ConfigurationError as e:
                logger.error(f"Failed to read configuration: {e.technical_message}")
                self._notify_observers(ConfigEvent.CONFIG_REJECTED, error=e)
                return False

            if not self._publish(config):
                return False

            with self._lock:
                self._current = config

        logger.info(
            f"Configuration loaded: {len(config.strips)} strip(s), "
            f"{config.fps} fps, {config.ups} ups, lerp {config.lerp}"
        )
        self._notify_observers(ConfigEvent.CONFIG_LOADED, config=config)
        return True

    def _publish(self, config: Configuration) -> bool:
        """Offer ``config`` to the callback until it is accepted."""
        attempt = 0
        while True:
            try:
                if self._callback(config):
                    return True
            except Exception as e:
                logger.error(f"Configuration callback failed: {e}", exc_info=True)
                return False

            attempt += 1
            if attempt == 1:
                logger.debug("Configuration deferred by callback, retrying")

            if attempt <= ACCEPT_YIELD_ATTEMPTS:
                if self._stop.is_set():
                    return False
                time.sleep(0)
                continue

            delay = min(ACCEPT_MAX_DELAY, ACCEPT_BASE_DELAY * 2 ** (attempt - ACCEPT_YIELD_ATTEMPTS - 1))
            if self._stop.wait(delay):
                logger.debug("Store closed while configuration was deferred")
                return False

    # =================================================================
    # Watch Loop
    # =================================================================

    def _watch(self) -> None:
        """Reload whenever the config file changes, until closed."""
        while not self._stop.is_set():
            try:
                events = self._watcher.wait()
                changed = [event for event in events if event.path == self.path]
                if any(event.change is not ChangeType.DELETED for event in changed):
                    self.reload()
            except Exception as e:
                logger.error(f"Error watching configuration directory: {e}", exc_info=True)
                self._stop.wait(DEFAULT_POLL_INTERVAL)

        logger.debug("Configuration watch loop stopped")

    def close(self) -> None:
        """Stop watching and release the watcher (idempotent)."""
        if self._stop.is_set():
            return

        self._stop.set()
        self._watcher.close()

        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)

        logger.info("ConfigurationStore closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
