"""Enumerations for LED strip configuration."""

from enum import Enum


class StripType(str, Enum):
    """Physical channel used to reach a strip."""

    SERIAL = "serial"  # Byte-oriented link to a named serial device
    NETWORK = "network"  # TCP stream to a receiver at ip:port


class Orientation(str, Enum):
    """Scan direction of a segment over its screen region."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
