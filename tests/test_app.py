"""Integration tests for the application orchestrator."""

import threading
import time
from unittest.mock import Mock

import pytest

from ambientled.app import AmbientLedApp
from ambientled.core import SolidColorSource
from ambientled.exceptions import WatchSetupError
from ambientled.models import Color, Configuration
from ambientled.protocols import TransportEvent, TransportObserver


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


NETWORK_STRIP = {"type": "network", "ip": "10.0.0.5", "port": 5000, "leds": 4}


@pytest.fixture
def make_app(tmp_path, pause, opener):
    """Create apps on tmp_path and shut them down after the test."""
    apps = []

    def _make(**kwargs):
        kwargs.setdefault("source", SolidColorSource(Color(r=10, g=20, b=30)))
        app = AmbientLedApp(
            directory=tmp_path,
            pause=pause,
            opener=opener,
            backoff=0,
            poll_interval=0.01,
            **kwargs,
        )
        apps.append(app)
        return app

    yield _make
    for app in apps:
        app.shutdown()


@pytest.mark.integration
class TestStartup:
    """Test starting the application."""

    def test_start_applies_configuration(self, make_app, write_config, config_dict, configuration):
        write_config(config_dict)
        app = make_app()

        app.start()

        assert app.config == configuration
        assert list(app.updaters) == ["serial:Arduino"]
        assert wait_for(lambda: app.updaters["serial:Arduino"].is_connected)

    def test_frames_reach_transport(self, make_app, write_config, config_dict, opener):
        write_config(config_dict)
        app = make_app()
        app.start()

        # 10, 20, 30 after the 0.9 and 0.8 reductions
        assert wait_for(lambda: opener.opened and opener.last.frame[:3] == bytes([10, 18, 24]))

    def test_start_without_config(self, make_app):
        app = make_app()

        app.start()

        assert app.config is None
        assert app.updaters == {}

    def test_start_with_missing_directory(self, tmp_path, pause, opener):
        app = AmbientLedApp(directory=tmp_path / "missing", pause=pause, opener=opener)
        with pytest.raises(WatchSetupError):
            app.start()
        app.shutdown()


@pytest.mark.integration
class TestReconfiguration:
    """Test applying configuration edits to running strips."""

    def test_strip_added(self, make_app, write_config, config_dict):
        write_config(config_dict)
        app = make_app()
        app.start()

        config_dict["strips"].append(NETWORK_STRIP)
        write_config(config_dict)

        assert wait_for(lambda: "network:10.0.0.5:5000" in app.updaters)
        assert app.colors["network:10.0.0.5:5000"].shape == (4, 3)

    def test_strip_removed_is_closed(self, make_app, write_config, config_dict, opener):
        config_dict["strips"].append(NETWORK_STRIP)
        write_config(config_dict)
        app = make_app()
        app.start()
        assert wait_for(lambda: len(opener.opened) == 2)
        removed = next(t for t in opener.opened if t.address == "10.0.0.5:5000")

        config_dict["strips"].pop()
        write_config(config_dict)

        assert wait_for(lambda: removed.close_calls == 1)
        assert list(app.updaters) == ["serial:Arduino"]
        assert removed.sent[-1] == bytes(12)

    def test_settings_change_keeps_updater(self, make_app, write_config, config_dict):
        write_config(config_dict)
        app = make_app()
        app.start()
        updater = app.updaters["serial:Arduino"]

        config_dict["lerp"] = 0.9
        config_dict["fps"] = 30
        write_config(config_dict)

        assert wait_for(lambda: app.config.lerp == 0.9)
        assert app.updaters["serial:Arduino"] is updater
        assert updater.lerp == 0.9

    def test_invalid_edit_keeps_running(self, make_app, write_config, config_dict, configuration):
        write_config(config_dict)
        app = make_app()
        app.start()

        write_config("{")
        time.sleep(0.1)

        assert app.config == configuration
        assert list(app.updaters) == ["serial:Arduino"]

    def test_duplicate_strips_collapse(self, make_app, config_dict):
        app = make_app()
        config_dict["strips"].append(dict(config_dict["strips"][0]))

        assert app.apply_configuration(Configuration.model_validate(config_dict))
        assert list(app.updaters) == ["serial:Arduino"]

    def test_busy_reconfiguration_defers(self, make_app, configuration):
        app = make_app()

        with app._reconfigure_lock:
            assert app.apply_configuration(configuration) is False
        assert app.apply_configuration(configuration) is True

    def test_deferred_snapshot_applied_after_lock_released(self, make_app, write_config, config_dict):
        app = make_app()
        app.start()

        app._reconfigure_lock.acquire()
        write_config(config_dict)
        time.sleep(0.1)
        assert app.config is None
        app._reconfigure_lock.release()

        assert wait_for(lambda: app.config is not None)


@pytest.mark.integration
class TestPauseAndShutdown:
    """Test pause and shutdown across all strips."""

    def test_pause_closes_all_strips(self, make_app, write_config, config_dict, opener):
        config_dict["strips"].append(NETWORK_STRIP)
        write_config(config_dict)
        app = make_app()
        app.start()
        assert wait_for(lambda: all(u.is_connected for u in app.updaters.values()))

        app.pause()

        assert wait_for(lambda: not any(u.is_connected for u in app.updaters.values()))
        assert all(t.close_calls == 1 for t in opener.opened)

        app.resume()
        assert wait_for(lambda: all(u.is_connected for u in app.updaters.values()))

    def test_transport_observer(self, make_app, write_config, config_dict):
        observer = Mock(spec=TransportObserver)
        app = make_app()
        app.register_transport_observer(observer)

        write_config(config_dict)
        app.start()

        assert wait_for(lambda: observer.on_transport_event.called)
        observer.on_transport_event.assert_any_call(TransportEvent.CONNECTED, "serial:Arduino")

    def test_shutdown_closes_everything(self, make_app, write_config, config_dict, opener):
        write_config(config_dict)
        app = make_app()
        app.start()
        assert wait_for(lambda: opener.opened)

        app.shutdown()
        app.shutdown()

        assert app.updaters == {}
        assert opener.last.close_calls == 1
        assert app.apply_configuration(Configuration.model_validate(config_dict)) is True
        assert app.updaters == {}

    def test_run_forever_returns_after_shutdown(self, make_app, write_config, config_dict):
        write_config(config_dict)
        app = make_app()

        thread = threading.Thread(target=app.run_forever)
        thread.start()
        assert wait_for(lambda: app.config is not None)

        app.shutdown()
        thread.join(timeout=3.0)

        assert not thread.is_alive()
