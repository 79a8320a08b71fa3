"""Wiring: build a ``TimerEngine`` over the concrete collaborators."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from .database.db import configure_engine, init_db
from .database.models import utcnow
from .sessions.store import SqlSessionStore, SqlTimerStateStore
from .settings import EngineConfig, TimerSettings, load_settings
from .snapshot import FileSnapshotStore, SnapshotStore
from .tasks import TaskLookup, TaskRegistry
from .timer.engine import TimerEngine


def build_engine(
    settings: TimerSettings | None = None,
    config: EngineConfig | None = None,
    *,
    task_lookup: TaskLookup | None = None,
    snapshot_store: SnapshotStore | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> TimerEngine:
    """Create the database (if needed) and an engine bound to it.

    Missing settings are read from ``settings.json``.  The engine and
    both SQL stores share *clock*.
    """
    if settings is None or config is None:
        loaded_settings, loaded_config = load_settings()
        settings = settings or loaded_settings
        config = config or loaded_config

    if config.database_url:
        configure_engine(config.database_url)
    init_db()

    return TimerEngine(
        session_store=SqlSessionStore(clock),
        state_store=SqlTimerStateStore(clock),
        snapshot_store=snapshot_store or FileSnapshotStore(),
        task_lookup=task_lookup if task_lookup is not None else TaskRegistry(),
        settings=settings,
        config=config,
        clock=clock,
    )
