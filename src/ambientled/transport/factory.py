"""Open the right transport for a strip."""

import logging

from ambientled.exceptions import TransportConnectionError
from ambientled.models import Strip, StripType

from .base import FrameTransport
from .network_transport import NetworkTransport
from .serial_transport import SerialTransport

logger = logging.getLogger(__name__)


def open_transport(strip: Strip) -> FrameTransport:
    """
    Open the transport described by ``strip``.

    Args:
        strip: Strip configuration

    Returns:
        An open transport sized to ``strip.led_count``

    Raises:
        TransportConnectionError: If the link cannot be established
    """
    if strip.type is StripType.SERIAL:
        return SerialTransport.open(strip)
    if strip.type is StripType.NETWORK:
        return NetworkTransport.open(strip)
    raise TransportConnectionError(strip.address, f"unsupported strip type: {strip.type}")
