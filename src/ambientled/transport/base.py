"""Frame-buffered transport base class."""

import logging
from abc import ABC, abstractmethod

from ambientled.exceptions import TransportIOError
from ambientled.models import Color

from .protocols import ColorLike

logger = logging.getLogger(__name__)

BYTES_PER_LED = 3


class FrameTransport(ABC):
    """
    Base class holding the staged frame for one strip.

    ``write`` only touches the in-memory frame; ``flush`` hands the whole
    frame to ``_send`` in one call, so every flush produces a complete
    ``3 * led_count`` byte frame. Subclasses implement ``_send`` and
    ``_release``.
    """

    def __init__(self, address: str, led_count: int):
        """
        Initialize the frame buffer.

        Args:
            address: Device name or host:port (for logs and errors)
            led_count: Number of LEDs on the strip
        """
        if led_count <= 0:
            raise ValueError(f"led_count must be positive, got {led_count}")
        self.address = address
        self.led_count = led_count
        self._frame = bytearray(BYTES_PER_LED * led_count)
        self._closed = False

    @abstractmethod
    def _send(self, data: bytes) -> None:
        """Write ``data`` to the device and push it out. May raise OSError."""
        pass

    @abstractmethod
    def _release(self) -> None:
        """Release the underlying device or socket. May raise OSError."""
        pass

    @property
    def is_closed(self) -> bool:
        """True once close() or abort() has been called."""
        return self._closed

    @property
    def frame(self) -> bytes:
        """Copy of the currently staged frame."""
        return bytes(self._frame)

    def write(self, index: int, color: ColorLike) -> None:
        """Stage one LED's color at ``index``."""
        if not 0 <= index < self.led_count:
            raise IndexError(f"LED index {index} out of range for {self.led_count} LEDs")

        if isinstance(color, Color):
            r, g, b = color.r, color.g, color.b
        else:
            r, g, b = color

        offset = BYTES_PER_LED * index
        self._frame[offset] = int(r) & 0xFF
        self._frame[offset + 1] = int(g) & 0xFF
        self._frame[offset + 2] = int(b) & 0xFF

    def flush(self) -> None:
        """Send the staged frame."""
        if self._closed:
            raise TransportIOError(self.address, "flush", "transport is closed")
        try:
            self._send(bytes(self._frame))
        except OSError as e:
            raise TransportIOError(self.address, "flush", str(e)) from e

    def close(self) -> None:
        """Blank the strip, flush and release. Never raises."""
        if self._closed:
            return None

        try:
            self._frame[:] = bytes(len(self._frame))
            self._send(bytes(self._frame))
        except Exception as e:
            logger.debug(f"Could not blank {self.address} while closing: {e}")
        finally:
            self.abort()
        return None

    def abort(self) -> None:
        """Release without blanking. Never raises."""
        if self._closed:
            return
        self._closed = True
        try:
            self._release()
        except Exception as e:
            logger.debug(f"Error releasing {self.address}: {e}")
        logger.debug(f"Released transport {self.address}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address!r}, leds={self.led_count})"
