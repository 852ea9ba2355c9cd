"""Pytest fixtures for tests."""

import json
from pathlib import Path

import pytest

from ambientled.core import PauseFlag
from ambientled.exceptions import TransportConnectionError, TransportIOError
from ambientled.models import Color, Configuration, Strip, StripType
from ambientled.transport import FrameTransport


class RecordingTransport(FrameTransport):
    """In-memory transport that records every frame it sends."""

    def __init__(self, address: str = "fake", led_count: int = 3):
        super().__init__(address, led_count)
        self.sent: list[bytes] = []
        self.writes: list[tuple[int, tuple[int, int, int]]] = []
        self.close_calls = 0
        self.abort_calls = 0
        self.flush_calls = 0
        self.fail_after: int | None = None
        self.fail_on_write: int | None = None

    def write(self, index, color):
        if index == self.fail_on_write:
            raise TransportIOError(self.address, "write", "device unplugged")
        rgb = color.to_rgb_tuple() if isinstance(color, Color) else tuple(int(c) for c in color)
        self.writes.append((index, rgb))
        super().write(index, color)

    def flush(self):
        self.flush_calls += 1
        super().flush()

    def close(self):
        self.close_calls += 1
        return super().close()

    def abort(self):
        self.abort_calls += 1
        super().abort()

    def _send(self, data: bytes) -> None:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise OSError("device unplugged")
        self.sent.append(data)

    def _release(self) -> None:
        pass


class RecordingOpener:
    """Opener that hands out RecordingTransports, optionally failing first."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.calls = 0
        self.opened: list[RecordingTransport] = []

    def __call__(self, strip: Strip) -> RecordingTransport:
        self.calls += 1
        if self.calls <= self.failures:
            raise TransportConnectionError(strip.address, "not plugged in")
        transport = RecordingTransport(strip.address, strip.led_count)
        self.opened.append(transport)
        return transport

    @property
    def last(self) -> RecordingTransport:
        return self.opened[-1]


@pytest.fixture
def serial_strip():
    """A three LED serial strip."""
    return Strip(type=StripType.SERIAL, device_id="Arduino", led_count=3)


@pytest.fixture
def network_strip():
    """A four LED network strip."""
    return Strip(type=StripType.NETWORK, ip="127.0.0.1", port=5000, led_count=4)


@pytest.fixture
def config_dict():
    """On-disk configuration as a plain dict."""
    return {
        "ups": 30,
        "fps": 60,
        "lerp": 0.5,
        "strips": [
            {
                "type": "serial",
                "com": "Arduino",
                "leds": 10,
                "maxBrightness": 600,
                "reductionR": 1.0,
                "reductionG": 0.9,
                "reductionB": 0.8,
                "segments": [
                    {
                        "offset": 0, "length": 10, "display": 0, "x": 0, "y": 0,
                        "width": 1920, "height": 40, "steps": 4,
                        "orientation": True, "invert": False,
                    }
                ],
            }
        ],
    }


@pytest.fixture
def configuration(config_dict):
    """Parsed configuration."""
    return Configuration.model_validate(config_dict)


@pytest.fixture
def write_config(tmp_path):
    """Write a dict (or raw text) to tmp_path/config.json."""
    def _write(data, path: Path | None = None) -> Path:
        path = path or tmp_path / "config.json"
        text = data if isinstance(data, str) else json.dumps(data, indent=2)
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def pause():
    """A private pause flag (never the process-wide one)."""
    return PauseFlag()


@pytest.fixture
def opener():
    """Opener that always succeeds."""
    return RecordingOpener()
