"""Network transport for strips behind a TCP receiver (e.g. a Raspberry Pi)."""

import logging
import socket

from ambientled.exceptions import TransportConnectionError
from ambientled.models import Strip

from .base import FrameTransport

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 2.0
DEFAULT_WRITE_TIMEOUT = 1.0


class NetworkTransport(FrameTransport):
    """Streams raw frames over one TCP connection."""

    def __init__(self, sock: socket.socket, address: str, led_count: int):
        """
        Wrap an already connected socket.

        Args:
            sock: Connected TCP socket
            address: host:port (for logs)
            led_count: Number of LEDs on the strip
        """
        super().__init__(address, led_count)
        self._socket = sock

    @classmethod
    def open(
        cls,
        strip: Strip,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ) -> "NetworkTransport":
        """
        Connect to the strip's receiver.

        Raises:
            TransportConnectionError: If the connection cannot be established
        """
        try:
            sock = socket.create_connection((strip.ip, strip.port), timeout=connect_timeout)
        except OSError as e:
            raise TransportConnectionError(strip.address, str(e)) from e

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        # A stalled receiver must surface as an error instead of blocking the tick forever
        sock.settimeout(write_timeout)

        logger.info(f"Connected to network strip {strip.address}")
        return cls(sock, strip.address, strip.led_count)

    def _send(self, data: bytes) -> None:
        self._socket.sendall(data)

    def _release(self) -> None:
        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone
            pass
        self._socket.close()
