"""Shared test helpers for FocusLedger."""

from datetime import datetime, timedelta

from focusledger.database.models import utcnow
from focusledger.errors import SessionStoreError
from focusledger.sessions.store import SqlSessionStore, SqlTimerStateStore
from focusledger.timer.engine import TimerEngine

USER = "user-1"


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Deterministic naive-UTC clock; ``advance`` moves it forward."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingScheduler:
    """Stands in for ``QTimer.singleShot``; ``run_all`` fires pending calls."""

    def __init__(self):
        self.calls: list = []
        self.history: list = []

    def __call__(self, delay_ms, callback):
        self.calls.append((delay_ms, callback))
        self.history.append(delay_ms)

    def run_all(self) -> None:
        while self.calls:
            _, callback = self.calls.pop(0)
            callback()


class CountingSessionStore(SqlSessionStore):
    """Real SQL store that records every increment it is asked for."""

    def __init__(self, clock=utcnow):
        super().__init__(clock)
        self.increments: list = []
        self.created: list = []

    def create_session(self, fields):
        session_id = super().create_session(fields)
        self.created.append(session_id)
        return session_id

    def increment_duration(self, session_id, minutes):
        self.increments.append((session_id, minutes))
        super().increment_duration(session_id, minutes)


class FailingSessionStore(CountingSessionStore):
    """Raises ``SessionStoreError`` from the calls named in *failing*."""

    def __init__(self, *failing, clock=utcnow):
        super().__init__(clock)
        self.failing = set(failing)

    def _maybe_fail(self, name):
        if name in self.failing:
            raise SessionStoreError(f"{name} unavailable")

    def create_session(self, fields):
        self._maybe_fail("create_session")
        return super().create_session(fields)

    def increment_duration(self, session_id, minutes):
        self._maybe_fail("increment_duration")
        super().increment_duration(session_id, minutes)

    def update_session(self, session_id, fields):
        self._maybe_fail("update_session")
        super().update_session(session_id, fields)

    def cleanup_orphaned_sessions(self, user_id, **kwargs):
        self._maybe_fail("cleanup_orphaned_sessions")
        return super().cleanup_orphaned_sessions(user_id, **kwargs)


class CountingTimerStateStore(SqlTimerStateStore):
    """Real SQL timer-state store that counts saves."""

    def __init__(self, clock=utcnow):
        super().__init__(clock)
        self.saves: list = []

    def save_timer_state(self, user_id, data):
        self.saves.append(dict(data))
        super().save_timer_state(user_id, data)


def run_ticks(engine: TimerEngine, count: int) -> None:
    for _ in range(count):
        engine.tick()


def finish_mode(engine: TimerEngine) -> None:
    """Jump the countdown to zero (crediting nothing) and let the next
    tick run the mode transition."""
    engine._state.remaining_seconds = 0
    engine._state.last_counted_minute = None
    engine.tick()
