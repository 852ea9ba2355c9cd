"""Driving the color source at the capture rate.

Screen capture and per-segment averaging live behind the ``ColorSource``
protocol; this module only schedules a source and hands its frames,
color-corrected, to the strip updaters.
"""

import logging
import threading
import time
from collections.abc import Sequence
from typing import Optional, Protocol, runtime_checkable

import numpy.typing as npt

from ambientled.models import Color, Strip

from .frames import Frame, apply_correction, as_frame, solid_frame
from .strip_updater import StripUpdater

logger = logging.getLogger(__name__)


@runtime_checkable
class ColorSource(Protocol):
    """Produces one target color per LED for a strip."""

    def capture(self, strip: Strip) -> npt.ArrayLike | Sequence[Color]:
        """
        Capture the colors for ``strip``.

        Returns:
            ``strip.led_count`` colors as an ``(n, 3)`` array or a sequence
        """
        ...


class SolidColorSource:
    """Source that shows the same color on every LED."""

    def __init__(self, color: Color):
        self.color = color

    def capture(self, strip: Strip) -> Frame:
        return solid_frame(strip.led_count, self.color)


class CaptureLoop:
    """
    Polls a ColorSource at ``ups`` and publishes frames to the updaters.

    A failing capture for one strip is logged and skipped; the other
    strips still get their frame.
    """

    def __init__(self, source: ColorSource, ups: int):
        """
        Initialize the loop (not started).

        Args:
            source: Where target colors come from
            ups: Captures per second
        """
        self.source = source
        self._interval = 1.0 / ups
        self._updaters: tuple[StripUpdater, ...] = ()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def set_ups(self, ups: int) -> None:
        """Change the capture rate."""
        if ups <= 0:
            raise ValueError(f"ups must be positive, got {ups}")
        self._interval = 1.0 / ups

    def set_updaters(self, updaters: Sequence[StripUpdater]) -> None:
        """Replace the set of strips to capture for."""
        self._updaters = tuple(updaters)

    def capture_once(self) -> None:
        """Capture and publish one frame for every strip."""
        for updater in self._updaters:
            strip = updater.strip
            try:
                frame = as_frame(self.source.capture(strip), strip.led_count)
                updater.publish(apply_correction(frame, strip))
            except Exception as e:
                logger.error(f"Capture for {strip.key} failed: {e}")

    def start(self) -> None:
        """Start capturing on a background thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="Capture", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set():
            started = time.monotonic()
            self.capture_once()
            elapsed = time.monotonic() - started
            self._stop.wait(max(0.0, self._interval - elapsed))

    def stop(self) -> None:
        """Stop capturing."""
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.0)
