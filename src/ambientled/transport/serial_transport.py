"""Serial transport for strips driven by a microcontroller over USB."""

import logging
from typing import Optional

import serial
import serial.tools.list_ports
from serial.tools.list_ports_common import ListPortInfo

from ambientled.exceptions import TransportConnectionError
from ambientled.models import Strip

from .base import FrameTransport

logger = logging.getLogger(__name__)

DEFAULT_WRITE_TIMEOUT = 1.0


def list_serial_devices() -> list[ListPortInfo]:
    """Return the serial ports currently visible to the OS."""
    return sorted(serial.tools.list_ports.comports(), key=lambda port: port.device)


def resolve_device(name: str, ports: Optional[list[ListPortInfo]] = None) -> str:
    """
    Resolve a logical device name to a device path.

    Matching order:
        1. Exact device path or port name (``/dev/ttyACM0``, ``COM3``)
        2. Case-insensitive substring of description, product,
           manufacturer or serial number (``Arduino``)
        3. A name that already looks like a device path is used as-is,
           for ports the OS does not enumerate (pseudo terminals)

    Args:
        name: Logical device name from the ``com`` config field
        ports: Port list to search (defaults to the live port list)

    Returns:
        Device path to open

    Raises:
        TransportConnectionError: If nothing matches
    """
    if ports is None:
        ports = list_serial_devices()

    for port in ports:
        if name in (port.device, port.name):
            return port.device

    needle = name.lower()
    for port in ports:
        for attribute in (port.description, port.product, port.manufacturer, port.serial_number):
            if attribute and needle in attribute.lower():
                return port.device

    if name.startswith("/") or name.upper().startswith("COM"):
        return name

    raise TransportConnectionError(name, "no matching serial device found")


class SerialTransport(FrameTransport):
    """Streams frames to a serial device."""

    def __init__(self, port: serial.Serial, address: str, led_count: int):
        """
        Wrap an already opened serial port.

        Args:
            port: Open pyserial port
            address: Logical device name (for logs)
            led_count: Number of LEDs on the strip
        """
        super().__init__(address, led_count)
        self._port = port

    @classmethod
    def open(cls, strip: Strip, write_timeout: float = DEFAULT_WRITE_TIMEOUT) -> "SerialTransport":
        """
        Resolve and open the strip's serial device.

        Raises:
            TransportConnectionError: If the device cannot be found or opened
        """
        device = resolve_device(strip.device_id)
        try:
            port = serial.Serial(device, baudrate=strip.baudrate, write_timeout=write_timeout)
        except (serial.SerialException, OSError, ValueError) as e:
            raise TransportConnectionError(strip.device_id, str(e)) from e

        logger.info(f"Opened serial device {strip.device_id} ({device} @ {strip.baudrate} baud)")
        return cls(port, strip.device_id, strip.led_count)

    def _send(self, data: bytes) -> None:
        self._port.write(data)
        self._port.flush()

    def _release(self) -> None:
        self._port.close()
