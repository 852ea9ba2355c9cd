"""CLI commands for ambientled."""

from .config import config
from .serial import serial_group
from .test import test

__all__ = ["config", "serial_group", "test"]
