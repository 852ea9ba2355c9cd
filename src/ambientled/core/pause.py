"""Process-wide pause flag."""

import logging
import threading

logger = logging.getLogger(__name__)


class PauseFlag:
    """
    Level-triggered pause signal shared by all strip updaters.

    Backed by a ``threading.Event`` so reads and writes are atomic from any
    thread. Updaters read it once at the top of every tick.
    """

    def __init__(self, paused: bool = False):
        self._event = threading.Event()
        if paused:
            self._event.set()

    @property
    def is_paused(self) -> bool:
        """True while output is paused."""
        return self._event.is_set()

    def set(self, paused: bool) -> None:
        """Set the flag to ``paused``."""
        if paused:
            self.pause()
        else:
            self.resume()

    def pause(self) -> None:
        """Pause all strips (they blank and disconnect on their next tick)."""
        if not self._event.is_set():
            self._event.set()
            logger.info("Output paused")

    def resume(self) -> None:
        """Resume all strips (they reconnect on their next tick)."""
        if self._event.is_set():
            self._event.clear()
            logger.info("Output resumed")

    def __repr__(self) -> str:
        return f"PauseFlag(paused={self.is_paused})"


# Shared by every updater unless one is injected
pause_flag = PauseFlag()
