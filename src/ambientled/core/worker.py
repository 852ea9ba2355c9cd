"""Fixed-rate worker threads."""

import logging
import threading
import time
from typing import Optional

from .strip_updater import StripUpdater

logger = logging.getLogger(__name__)


class StripWorker:
    """
    Drives one StripUpdater at a fixed frame rate on its own thread.

    Ticks never overlap: a tick that overruns its slot delays the next one
    and any slots it covered are skipped rather than queued. Reconnect
    backoff inside a tick only ever blocks this strip's thread.
    """

    def __init__(self, updater: StripUpdater, fps: int):
        """
        Initialize the worker (not started).

        Args:
            updater: Updater to drive
            fps: Ticks per second
        """
        self.updater = updater
        self._interval = 1.0 / fps
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0
        self.skipped = 0

    @property
    def fps(self) -> float:
        """Current tick rate."""
        return 1.0 / self._interval

    @property
    def is_running(self) -> bool:
        """True while the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def set_fps(self, fps: int) -> None:
        """Change the tick rate; takes effect from the next tick."""
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self._interval = 1.0 / fps

    def start(self) -> None:
        """Start ticking."""
        if self.is_running:
            logger.warning(f"Worker for {self.updater.strip.key} is already running")
            return

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"Strip {self.updater.strip.key}", daemon=True
        )
        self._thread.start()
        logger.debug(f"Worker for {self.updater.strip.key} started at {self.fps:.0f} fps")

    def _run(self) -> None:
        deadline = time.monotonic()
        while not self._stop.is_set():
            try:
                self.updater.tick()
            except Exception as e:
                logger.error(f"Unexpected error ticking {self.updater.strip.key}: {e}", exc_info=True)
            self.ticks += 1

            interval = self._interval
            deadline += interval
            now = time.monotonic()
            if deadline < now:
                missed = int((now - deadline) // interval) + 1
                self.skipped += missed
                deadline += missed * interval
            self._stop.wait(deadline - now)

        self.updater.shutdown()

    def stop(self, timeout: float = 2.0) -> None:
        """
        Stop ticking, then blank and close the strip.

        The strip is closed by whichever thread owns the updater last: the
        worker thread as it exits, or the caller when the thread is not
        running. If the thread does not exit within ``timeout`` it still
        closes the strip once its current tick returns.
        """
        self._stop.set()
        self.updater.interrupt()

        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Worker for {self.updater.strip.key} did not stop within {timeout}s")
                return

        if not self.is_running:
            self.updater.shutdown()
        logger.debug(f"Worker for {self.updater.strip.key} stopped after {self.ticks} ticks")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
