"""Shared pytest fixtures for FocusLedger tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from focusledger.database.db import configure_engine, init_db
from focusledger.settings import EngineConfig, TimerSettings
from focusledger.snapshot import MemorySnapshotStore
from focusledger.tasks import Task, TaskRegistry
from focusledger.timer.engine import TimerEngine

from helpers import (
    CountingSessionStore,
    CountingTimerStateStore,
    FakeClock,
    RecordingScheduler,
    USER,
)


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def snapshots():
    return MemorySnapshotStore()


@pytest.fixture
def sessions(clock):
    return CountingSessionStore(clock)


@pytest.fixture
def timer_states(clock):
    return CountingTimerStateStore(clock)


@pytest.fixture
def tasks():
    return TaskRegistry([
        Task(id="t1", title="Write report", project_id="p1"),
        Task(id="t2", title="Review PR", project_id="p1"),
    ])


@pytest.fixture
def make_engine(qapp, sessions, timer_states, snapshots, tasks, clock, scheduler):
    """Factory for engines sharing this test's stores (one per "device")."""

    def _make(settings=None, config=None, *, snapshot_store=None, session_store=None):
        return TimerEngine(
            parent=None,
            session_store=session_store or sessions,
            state_store=timer_states,
            snapshot_store=snapshot_store if snapshot_store is not None else snapshots,
            task_lookup=tasks,
            settings=settings or TimerSettings(),
            config=config or EngineConfig(),
            clock=clock,
            scheduler=scheduler,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    """Signed-in engine with default settings (auto-start OFF)."""
    e = make_engine()
    e.on_auth_changed(USER)
    return e


@pytest.fixture
def engine_auto(make_engine):
    """Signed-in engine with both auto-start flags ON."""
    e = make_engine(TimerSettings(auto_start_breaks=True, auto_start_pomodoros=True))
    e.on_auth_changed(USER)
    return e


@pytest.fixture
def engine_offline(make_engine):
    """Engine nobody signed into: the countdown runs, nothing durable."""
    return make_engine()
