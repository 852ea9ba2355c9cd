"""Application orchestrator: configuration store, strip workers and capture."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ambientled.core import (
    DEFAULT_BACKOFF,
    CaptureLoop,
    ColorSource,
    Frame,
    PauseFlag,
    StripUpdater,
    StripWorker,
    pause_flag,
)
from ambientled.exceptions import ErrorContext
from ambientled.models import Configuration, Strip
from ambientled.protocols import TransportObserver
from ambientled.services import CONFIG_FILENAME, ConfigurationStore
from ambientled.transport import Transport, open_transport

logger = logging.getLogger(__name__)

DEFAULT_UPS = 30


@dataclass(slots=True)
class _StripEntry:
    updater: StripUpdater
    worker: StripWorker


class AmbientLedApp:
    """
    Keeps one StripUpdater + StripWorker per configured strip in sync with
    ``config.json``.

    Strips are identified by ``Strip.key`` (type + address), so reordering
    strips in the file keeps their frames and connections; strips that
    disappear from the file are blanked and closed.

    Usage Example:
        ```python
        app = AmbientLedApp(directory=Path.cwd(), source=my_capture)
        app.start()
        app.colors["network:10.0.0.5:5000"][0] = (255, 0, 0)
        app.shutdown()
        ```
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        source: Optional[ColorSource] = None,
        pause: PauseFlag = pause_flag,
        opener: Callable[[Strip], Transport] = open_transport,
        backoff: float = DEFAULT_BACKOFF,
        filename: str = CONFIG_FILENAME,
        poll_interval: float = 0.25,
    ):
        """
        Initialize the application (nothing runs until start()).

        Args:
            directory: Directory holding ``config.json`` (default: working directory)
            source: Optional color source driven at the configured ups
            pause: Pause flag shared by all strips
            opener: Opens transports (injectable for tests)
            backoff: Reconnect backoff in seconds
            filename: Config file name
            poll_interval: Config watcher poll interval in seconds
        """
        self.directory = directory
        self.pause_flag = pause
        self._opener = opener
        self._backoff = backoff
        self._filename = filename
        self._poll_interval = poll_interval

        self._entries: dict[str, _StripEntry] = {}
        self._reconfigure_lock = threading.Lock()
        self._transport_observers: list[TransportObserver] = []
        self._config: Optional[Configuration] = None
        self._store: Optional[ConfigurationStore] = None
        self._capture = CaptureLoop(source, DEFAULT_UPS) if source is not None else None
        self._shutdown = threading.Event()

    # =================================================================
    # Accessors
    # =================================================================

    @property
    def config(self) -> Optional[Configuration]:
        """The configuration currently applied."""
        return self._config

    @property
    def updaters(self) -> dict[str, StripUpdater]:
        """Updaters keyed by strip key."""
        return {key: entry.updater for key, entry in dict(self._entries).items()}

    @property
    def colors(self) -> dict[str, Frame]:
        """Live target frames keyed by strip key."""
        return {key: entry.updater.colors for key, entry in dict(self._entries).items()}

    def register_transport_observer(self, observer: TransportObserver) -> None:
        """Observe connection changes of every current and future strip."""
        self._transport_observers.append(observer)
        for entry in self._entries.values():
            entry.updater.register_observer(observer)

    # =================================================================
    # Reconfiguration
    # =================================================================

    def apply_configuration(self, config: Configuration) -> bool:
        """
        Reconcile running strips with ``config``.

        Returns False without waiting when another reconfiguration is in
        progress, so the store re-offers the snapshot later.
        """
        if self._shutdown.is_set():
            return True

        if not self._reconfigure_lock.acquire(blocking=False):
            return False
        try:
            self._reconcile(config)
        finally:
            self._reconfigure_lock.release()
        return True

    def _reconcile(self, config: Configuration) -> None:
        wanted: dict[str, Strip] = {}
        for strip in config.strips:
            if strip.key in wanted:
                logger.warning(f"Duplicate strip {strip.key} in configuration, using the last one")
            wanted[strip.key] = strip

        for key in [key for key in self._entries if key not in wanted]:
            entry = self._entries.pop(key)
            entry.worker.stop()
            logger.info(f"Removed strip {key}")

        for key, strip in wanted.items():
            entry = self._entries.get(key)
            if entry is not None:
                entry.updater.configure(strip, config.lerp)
                entry.worker.set_fps(config.fps)
                continue

            updater = StripUpdater(
                strip,
                config.lerp,
                pause=self.pause_flag,
                opener=self._opener,
                backoff=self._backoff,
                connect=False,
            )
            for observer in self._transport_observers:
                updater.register_observer(observer)

            worker = StripWorker(updater, config.fps)
            self._entries[key] = _StripEntry(updater, worker)
            worker.start()
            logger.info(f"Added strip {key} ({strip.led_count} LEDs)")

        if self._capture is not None:
            self._capture.set_ups(config.ups)
            self._capture.set_updaters([self._entries[key].updater for key in wanted])

        self._config = config

    # =================================================================
    # Lifecycle
    # =================================================================

    def start(self) -> None:
        """
        Load the configuration, start strip workers and begin watching.

        Raises:
            WatchSetupError: If the config directory cannot be watched
        """
        with ErrorContext("start configuration store", logger_instance=logger):
            self._store = ConfigurationStore(
                self.apply_configuration,
                directory=self.directory,
                filename=self._filename,
                poll_interval=self._poll_interval,
            )

        if self._store.current is None:
            logger.warning(f"No valid configuration at {self._store.path} yet, waiting for changes")

        if self._capture is not None:
            self._capture.start()

        logger.info("Ambient LED started")

    def pause(self) -> None:
        """Blank and disconnect all strips until resume()."""
        self.pause_flag.pause()

    def resume(self) -> None:
        """Reconnect all strips."""
        self.pause_flag.resume()

    def run_forever(self) -> None:
        """Start and block until shutdown() is called from another thread."""
        self.start()
        try:
            while not self._shutdown.wait(0.5):
                pass
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Stop watching, stop capture, then blank and close every strip."""
        if self._shutdown.is_set() and not self._entries:
            return
        self._shutdown.set()

        if self._store is not None:
            self._store.close()
        if self._capture is not None:
            self._capture.stop()

        with self._reconfigure_lock:
            for key, entry in list(self._entries.items()):
                entry.worker.stop()
                logger.debug(f"Stopped strip {key}")
            self._entries.clear()

        logger.info("Ambient LED stopped")
