"""Transport protocol shared by serial and network strips."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ambientled.models import Color

# A color as accepted by Transport.write: a Color or an (r, g, b) sequence
ColorLike = Color | Sequence[int]


@runtime_checkable
class Transport(Protocol):
    """
    Physical channel that streams RGB frames to one strip.

    Byte layout on the wire is the same for every implementation: 3 bytes
    per LED in R, G, B order, LEDs in ascending index order, no header.
    All methods block the calling thread.
    """

    address: str
    led_count: int

    def write(self, index: int, color: ColorLike) -> None:
        """
        Stage one LED's color for the next flush.

        Args:
            index: LED index, 0 <= index < led_count
            color: The color to stage

        Raises:
            IndexError: If index is outside the strip
        """
        ...

    def flush(self) -> None:
        """
        Send the staged frame to the device.

        Raises:
            TransportIOError: If the device or socket rejects the write
        """
        ...

    def close(self) -> None:
        """
        Blank every LED, flush and release the device. Never raises.

        Returns None so callers can write ``transport = transport.close()``.
        """
        ...

    def abort(self) -> None:
        """Release the device without blanking. Never raises."""
        ...
