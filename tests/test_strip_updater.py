"""Tests for the per-strip smoothing and streaming loop."""

import threading
from unittest.mock import Mock

import numpy as np
import pytest

from ambientled.core import Connected, Disconnected, StripUpdater
from ambientled.models import Color
from ambientled.protocols import TransportEvent, TransportObserver

from conftest import RecordingOpener


def make_updater(strip, pause, opener, lerp=0.5, **kwargs):
    kwargs.setdefault("backoff", 0)
    return StripUpdater(strip, lerp, pause=pause, opener=opener, **kwargs)


def frames(transport):
    """Frames sent so far as lists of (r, g, b) lists."""
    return [np.frombuffer(data, dtype=np.uint8).reshape(-1, 3).tolist() for data in transport.sent]


@pytest.mark.unit
class TestConnection:
    """Test connecting and the connection state."""

    def test_connects_on_construction(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)

        assert opener.calls == 1
        assert updater.is_connected
        assert isinstance(updater.state, Connected)
        assert updater.state.transport is opener.last

    def test_deferred_connection(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener, connect=False)

        assert opener.calls == 0
        assert isinstance(updater.state, Disconnected)

    def test_reopen_retries_until_success(self, serial_strip, pause):
        opener = RecordingOpener(failures=3)

        updater = make_updater(serial_strip, pause, opener)

        assert opener.calls == 4
        assert updater.is_connected

    def test_reopen_returns_false_when_paused(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener, connect=False)
        pause.pause()

        assert updater.reopen() is False
        assert opener.calls == 0

    def test_interrupt_ends_reopen(self, serial_strip, pause):
        opener = RecordingOpener(failures=10**9)
        updater = make_updater(serial_strip, pause, opener, connect=False, backoff=0.01)
        result = []

        thread = threading.Thread(target=lambda: result.append(updater.reopen()))
        thread.start()
        updater.interrupt()
        thread.join(timeout=2.0)

        assert not thread.is_alive()
        assert result == [False]
        assert not updater.is_connected

    def test_connected_event(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener, connect=False)
        observer = Mock(spec=TransportObserver)
        updater.register_observer(observer)

        updater.reopen()

        observer.on_transport_event.assert_called_once_with(TransportEvent.CONNECTED, serial_strip.key)


@pytest.mark.unit
class TestTick:
    """Test blending and streaming."""

    def test_tick_blends_toward_target(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.colors[0] = (255, 0, 0)

        updater.tick()
        updater.tick()

        assert frames(opener.last) == [
            [[128, 0, 0], [0, 0, 0], [0, 0, 0]],
            [[192, 0, 0], [0, 0, 0], [0, 0, 0]],
        ]
        assert updater.displayed.tolist()[0] == [192, 0, 0]

    def test_tick_writes_every_led_in_order_then_flushes_once(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)

        updater.tick()

        assert [index for index, _ in opener.last.writes] == [0, 1, 2]
        assert len(opener.last.sent) == 1

    def test_converges_to_target(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.publish([(255, 10, 100)] * 3)

        for _ in range(20):
            updater.tick()

        assert updater.displayed.tolist() == [[255, 10, 100]] * 3

    def test_lerp_one_is_immediate(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener, lerp=1.0)
        updater.set_color(1, Color(r=5, g=6, b=7))

        updater.tick()

        assert frames(opener.last)[0][1] == [5, 6, 7]

    def test_set_color_is_not_corrected(self, serial_strip, pause, opener):
        """Brightness cap and reductions only apply to captured frames."""
        dimmed = serial_strip.model_copy(update={"max_brightness": 300, "reduction_g": 0.5})
        updater = make_updater(dimmed, pause, opener, lerp=1.0)
        updater.set_color(0, Color(r=200, g=200, b=200))
        updater.colors[1] = (255, 255, 255)

        updater.tick()

        assert frames(opener.last)[0][:2] == [[200, 200, 200], [255, 255, 255]]

    def test_publish_checks_length(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        with pytest.raises(ValueError):
            updater.publish([(0, 0, 0)] * 2)

    def test_disconnected_tick_reconnects_without_writing(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener, connect=False)

        updater.tick()

        assert updater.is_connected
        assert opener.last.sent == []


@pytest.mark.unit
class TestPause:
    """Test pausing and resuming output."""

    def test_pause_closes_once_and_stops_writing(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.colors[0] = (255, 255, 255)
        updater.tick()
        transport = opener.last

        pause.pause()
        for _ in range(5):
            updater.tick()

        assert transport.close_calls == 1
        assert transport.sent[-1] == bytes(9)
        assert len(transport.writes) == 3
        assert not updater.is_connected
        assert opener.calls == 1

    def test_pause_notifies_disconnected(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        observer = Mock(spec=TransportObserver)
        updater.register_observer(observer)

        pause.pause()
        updater.tick()

        observer.on_transport_event.assert_called_once_with(TransportEvent.DISCONNECTED, serial_strip.key)

    def test_resume_reconnects(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        pause.pause()
        updater.tick()

        pause.resume()
        updater.tick()
        updater.tick()

        assert opener.calls == 2
        assert updater.state.transport is opener.last
        assert len(opener.last.sent) == 1

    def test_paused_before_connecting(self, serial_strip, pause, opener):
        pause.pause()
        updater = make_updater(serial_strip, pause, opener)

        updater.tick()

        assert opener.calls == 0
        assert not updater.is_connected


@pytest.mark.unit
class TestFailure:
    """Test transport failures and recovery."""

    def test_failure_discards_and_reopens(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        broken = opener.last
        broken.fail_after = 0

        updater.tick()

        assert broken.abort_calls == 1
        assert broken.close_calls == 0
        assert opener.calls == 2
        assert updater.state.transport is opener.last
        assert updater.state.transport is not broken

    def test_write_failure_stops_frame_mid_way(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        broken = opener.last
        broken.fail_on_write = 1

        updater.tick()

        assert [index for index, _ in broken.writes] == [0]
        assert broken.flush_calls == 0
        assert broken.sent == []
        assert broken.abort_calls == 1
        assert broken.close_calls == 0
        assert opener.calls == 2
        assert updater.state.transport is opener.last

    def test_no_writes_to_failed_transport(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        broken = opener.last
        broken.fail_after = 0
        updater.tick()
        writes_before = len(broken.writes)

        updater.tick()
        updater.tick()

        assert len(broken.writes) == writes_before
        assert len(opener.last.sent) == 2

    def test_failure_events(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        observer = Mock(spec=TransportObserver)
        updater.register_observer(observer)
        opener.last.fail_after = 0

        updater.tick()

        events = [call.args[0] for call in observer.on_transport_event.call_args_list]
        assert events == [TransportEvent.FAILED, TransportEvent.CONNECTED]

    def test_reconnect_retries_after_failure(self, serial_strip, pause):
        opener = RecordingOpener()
        updater = make_updater(serial_strip, pause, opener)
        opener.last.fail_after = 0
        opener.failures = opener.calls + 2

        updater.tick()

        assert opener.calls == 4
        assert updater.is_connected

    def test_displayed_frame_survives_reconnect(self, serial_strip, pause, opener):
        """A new transport continues the fade instead of restarting from black."""
        updater = make_updater(serial_strip, pause, opener)
        updater.colors[0] = (100, 0, 0)
        updater.tick()
        assert frames(opener.last)[0][0] == [50, 0, 0]
        opener.last.fail_after = 1

        updater.tick()
        updater.tick()

        assert frames(opener.last)[0][0][0] > 50


@pytest.mark.unit
class TestConfigure:
    """Test swapping strip settings."""

    def test_lerp_change(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.configure(serial_strip, 1.0)
        updater.colors[0] = (255, 0, 0)

        updater.tick()

        assert frames(opener.last)[0][0] == [255, 0, 0]
        assert opener.calls == 1

    def test_led_count_change_resets_frames_and_reconnects(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.colors[0] = (255, 0, 0)
        updater.tick()
        first = opener.last

        longer = serial_strip.model_copy(update={"led_count": 5})
        updater.configure(longer, 0.5)
        updater.tick()
        updater.tick()

        assert first.close_calls == 1
        assert updater.colors.shape == (5, 3)
        assert opener.last.led_count == 5
        assert frames(opener.last) == [[[0, 0, 0]] * 5]

    def test_brightness_change_keeps_transport(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.configure(serial_strip.model_copy(update={"max_brightness": 100}), 0.5)

        updater.tick()

        assert opener.calls == 1


@pytest.mark.unit
class TestShutdown:
    """Test shutting an updater down."""

    def test_shutdown_blanks_and_closes(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)
        updater.colors[:] = 200
        updater.tick()

        updater.shutdown()

        assert opener.last.close_calls == 1
        assert opener.last.sent[-1] == bytes(9)
        assert not updater.is_connected

    def test_shutdown_stops_reconnecting(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener, connect=False)
        updater.shutdown()

        assert updater.reopen() is False
        assert opener.calls == 0

    def test_shutdown_while_opening_closes_new_transport(self, serial_strip, pause):
        """A transport that finishes opening after shutdown is closed, not kept."""
        recording = RecordingOpener()
        updaters = []

        def opener(strip):
            transport = recording(strip)
            updaters[0].shutdown()
            return transport

        updater = make_updater(serial_strip, pause, opener, connect=False)
        updaters.append(updater)

        assert updater.reopen() is False
        assert recording.last.close_calls == 1
        assert not updater.is_connected

    def test_shutdown_is_idempotent(self, serial_strip, pause, opener):
        updater = make_updater(serial_strip, pause, opener)

        updater.shutdown()
        updater.shutdown()

        assert opener.last.close_calls == 1
