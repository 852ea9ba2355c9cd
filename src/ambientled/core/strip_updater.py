"""Per-strip smoothing and streaming loop."""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy.typing as npt

from ambientled.exceptions import TransportError
from ambientled.models import Color, Strip
from ambientled.protocols import TransportEvent, TransportObserver
from ambientled.transport import Transport, open_transport
from ambientled.utils import ObserverManager

from .frames import Frame, as_frame, black_frame, blend_frame
from .pause import PauseFlag, pause_flag

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF = 0.5


@dataclass(frozen=True, slots=True)
class Connected:
    """A live transport and the strip settings it was opened with."""

    transport: Transport
    strip: Strip


@dataclass(frozen=True, slots=True)
class Disconnected:
    """No transport; the next active tick reopens one."""


ConnectionState = Connected | Disconnected

DISCONNECTED = Disconnected()


@dataclass(frozen=True, slots=True)
class _Settings:
    strip: Strip
    lerp: float


def _link_changed(opened: Strip, current: Strip) -> bool:
    """True if the transport must be reopened to honour ``current``."""
    return (
        opened.type != current.type
        or opened.address != current.address
        or opened.led_count != current.led_count
        or opened.baudrate != current.baudrate
    )


class StripUpdater:
    """
    Smooths target colors toward the strip and streams them every tick.

    Holds two frames for the strip: ``colors`` (the target, written by the
    capture side) and the displayed frame (written only inside ``tick``).
    Each tick blends target toward displayed with the configured lerp
    factor, writes every LED in ascending order and flushes once.

    State machine:
        ``Disconnected`` -> ``Connected`` via ``reopen()``;
        ``Connected`` -> ``Disconnected`` on pause (transport closed, strip
        blanked) or on any transport failure (transport discarded, then
        ``reopen()`` runs synchronously).

    Threading:
        ``tick``, ``reopen`` and ``shutdown`` must be called from a single
        worker thread (see StripWorker). ``publish``, ``set_color`` and
        ``configure`` may be called from any thread.
    """

    def __init__(
        self,
        strip: Strip,
        lerp: float,
        pause: PauseFlag = pause_flag,
        opener: Callable[[Strip], Transport] = open_transport,
        backoff: float = DEFAULT_BACKOFF,
        connect: bool = True,
    ):
        """
        Initialize the updater.

        Args:
            strip: Strip configuration
            lerp: Blend factor (0.0-1.0) applied each tick
            pause: Pause flag observed at the top of every tick
            opener: Opens a transport for a strip
            backoff: Seconds to wait before each connection attempt
            connect: Call ``reopen()`` before returning. Pass False when a
                worker thread will connect, so the caller never blocks on
                missing hardware.
        """
        self._lock = threading.Lock()
        self._settings = _Settings(strip, lerp)
        self._target = black_frame(strip.led_count)
        self._displayed = black_frame(strip.led_count)
        self._state: ConnectionState = DISCONNECTED

        self._pause = pause
        self._opener = opener
        self._backoff = backoff
        self._stopped = threading.Event()
        self._failing = False

        self._observers = ObserverManager[TransportObserver](observer_type_name="transport")

        if connect:
            self.reopen()

    # =================================================================
    # Observers
    # =================================================================

    def register_observer(self, observer: TransportObserver) -> None:
        """Register an observer for connection state changes."""
        self._observers.register(observer)

    def unregister_observer(self, observer: TransportObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _notify(self, event: TransportEvent) -> None:
        self._observers.notify("on_transport_event", event, self.strip.key)

    # =================================================================
    # State
    # =================================================================

    @property
    def strip(self) -> Strip:
        """Current strip settings."""
        return self._settings.strip

    @property
    def lerp(self) -> float:
        """Current blend factor."""
        return self._settings.lerp

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True while a transport is open."""
        return isinstance(self._state, Connected)

    @property
    def colors(self) -> Frame:
        """
        Live target frame; ``colors[i] = (r, g, b)`` sets one LED's target.

        Values written here are sent as-is. The strip's ``maxBrightness``
        and channel reductions are only applied to frames published by
        ``CaptureLoop`` (see ``apply_correction``).
        """
        return self._target

    @property
    def displayed(self) -> Frame:
        """Copy of the frame most recently sent to the strip."""
        return self._displayed.copy()

    # =================================================================
    # Target frame (capture side)
    # =================================================================

    def publish(self, colors: npt.ArrayLike | Sequence[Color]) -> None:
        """
        Replace the whole target frame.

        The new frame is built off to the side and swapped in with one
        reference assignment, so a tick never sees a half-written frame.

        Raises:
            ValueError: If the frame does not match the strip's LED count
        """
        with self._lock:
            self._target = as_frame(colors, self._settings.strip.led_count)

    def set_color(self, index: int, color: Color) -> None:
        """Set the target color of one LED, without brightness correction."""
        with self._lock:
            self._target[index] = color.to_rgb_tuple()

    def configure(self, strip: Strip, lerp: float) -> None:
        """
        Swap in new strip settings.

        The tick in flight finishes with the settings it started with. When
        the LED count changes both frames are reset to black; when any
        link parameter changes the transport is reopened on the next tick.
        """
        with self._lock:
            if strip.led_count != self._settings.strip.led_count:
                self._target = black_frame(strip.led_count)
                self._displayed = black_frame(strip.led_count)
            self._settings = _Settings(strip, lerp)
        logger.debug(f"Reconfigured strip {strip.key}: {strip.led_count} LEDs, lerp {lerp}")

    # =================================================================
    # Worker side
    # =================================================================

    def tick(self) -> None:
        """Run one refresh: observe pause, blend, write every LED, flush."""
        with self._lock:
            settings = self._settings
            target = self._target
            displayed = self._displayed

        state = self._state

        if self._pause.is_paused:
            if isinstance(state, Connected):
                self._state = DISCONNECTED
                state.transport.close()
                logger.info(f"Strip {settings.strip.key} paused, transport closed")
                self._notify(TransportEvent.DISCONNECTED)
            return

        if isinstance(state, Connected) and _link_changed(state.strip, settings.strip):
            logger.info(f"Strip {settings.strip.key} link settings changed, reconnecting")
            self._state = DISCONNECTED
            state.transport.close()
            self._notify(TransportEvent.DISCONNECTED)
            state = DISCONNECTED

        if not isinstance(state, Connected):
            logger.debug(f"Strip {settings.strip.key} is not connected")
            self.reopen()
            return

        transport = state.transport
        blended = blend_frame(target, displayed, settings.lerp)
        try:
            for index, rgb in enumerate(blended.tolist()):
                displayed[index] = rgb
                transport.write(index, rgb)
            transport.flush()
        except (TransportError, OSError) as e:
            self._discard(transport, e)
            self.reopen()

    def _discard(self, transport: Transport, error: Exception) -> None:
        """Drop a broken transport without blanking the strip."""
        self._state = DISCONNECTED
        transport.abort()

        message = error.technical_message if isinstance(error, TransportError) else str(error)
        if not self._failing:
            logger.error(f"Strip {self.strip.key} transport failed: {message}")
            self._failing = True
        else:
            logger.debug(f"Strip {self.strip.key} transport failed again: {message}")
        self._notify(TransportEvent.FAILED)

    def reopen(self) -> bool:
        """
        Open a new transport, retrying until it succeeds.

        Waits the backoff interval before every attempt. There is no retry
        limit; the loop only ends early when the updater is interrupted or
        output is paused.

        Returns:
            True if connected, False if interrupted or paused first
        """
        attempts = 0
        while not self._stopped.is_set():
            if self._stopped.wait(self._backoff):
                break
            if self._pause.is_paused:
                return False

            strip = self.strip
            attempts += 1
            if attempts == 1:
                logger.info(f"Reopening connection to {strip.key}")

            try:
                transport = self._opener(strip)
            except (TransportError, OSError) as e:
                message = e.technical_message if isinstance(e, TransportError) else str(e)
                level = logging.WARNING if attempts == 1 else logging.DEBUG
                logger.log(level, f"Connection attempt {attempts} to {strip.key} failed: {message}")
                continue

            # shutdown() may have run while the opener was blocked
            if self._stopped.is_set():
                transport.close()
                logger.debug(f"Strip {strip.key} stopped while connecting, transport closed")
                return False

            self._state = Connected(transport, strip)
            self._failing = False
            logger.info(f"Strip {strip.key} connected after {attempts} attempt(s)")
            self._notify(TransportEvent.CONNECTED)
            return True

        return False

    def interrupt(self) -> None:
        """Stop any pending or future ``reopen`` loop. Safe from any thread."""
        self._stopped.set()

    def shutdown(self) -> None:
        """Blank and close the transport and stop reconnecting."""
        self.interrupt()
        state = self._state
        self._state = DISCONNECTED
        if isinstance(state, Connected):
            state.transport.close()
            logger.info(f"Strip {state.strip.key} shut down")
            self._notify(TransportEvent.DISCONNECTED)

    def __repr__(self) -> str:
        return f"StripUpdater({self.strip.key!r}, connected={self.is_connected})"
