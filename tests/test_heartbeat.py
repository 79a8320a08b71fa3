"""Tests for the QTimer heartbeat that drives ``TimerEngine.tick``."""

import pytest
from PyQt6.QtCore import QEventLoop, QTimer

from focusledger.timer.heartbeat import TICK_INTERVAL_MS, Heartbeat


@pytest.fixture
def heartbeat(engine):
    hb = Heartbeat(engine)
    yield hb
    hb.stop()


class TestHeartbeat:

    def test_idle_engine_does_not_tick(self, heartbeat):
        assert heartbeat.is_active is False

    def test_interval(self, heartbeat):
        assert heartbeat._qt_timer.interval() == TICK_INTERVAL_MS

    def test_follows_start_and_pause(self, engine, heartbeat):
        engine.start()
        assert heartbeat.is_active is True
        engine.pause()
        assert heartbeat.is_active is False

    def test_stops_when_device_hands_over(self, engine, heartbeat):
        engine.start()
        engine.set_active_device(False)
        assert heartbeat.is_active is False

    def test_restarts_when_device_takes_over(self, engine, heartbeat):
        engine.start()
        engine.set_active_device(False)
        engine.start()
        assert heartbeat.is_active is True

    def test_stops_on_sign_out(self, engine, heartbeat):
        engine.start()
        engine.on_auth_changed(None)
        assert heartbeat.is_active is False

    def test_timeout_ticks_engine(self, engine):
        hb = Heartbeat(engine, interval_ms=5)
        engine.start()
        loop = QEventLoop()
        QTimer.singleShot(100, loop.quit)
        loop.exec()
        hb.stop()
        assert engine.remaining < 25 * 60
