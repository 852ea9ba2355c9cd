"""Transports that stream RGB frames to LED strips.

Both implementations stage colors with ``write`` and send one complete
frame per ``flush``: 3 bytes per LED (R, G, B), ascending index, no
header or checksum.
"""

from .base import BYTES_PER_LED, FrameTransport
from .factory import open_transport
from .network_transport import NetworkTransport
from .protocols import ColorLike, Transport
from .serial_transport import SerialTransport, list_serial_devices, resolve_device

__all__ = [
    "BYTES_PER_LED",
    "ColorLike",
    "FrameTransport",
    "NetworkTransport",
    "SerialTransport",
    "Transport",
    "list_serial_devices",
    "open_transport",
    "resolve_device",
]
