"""Timer data model.

``TimerState`` is owned by :class:`~focusledger.timer.engine.TimerEngine`
and only mutated by its operations.  ``state_to_record`` flattens it into
the plain dict both persistence tiers store; ``record_mode`` and friends
read such a dict back, tolerating missing keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from ..settings import TimerSettings
from ..tasks import Task


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    WORK = "work"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"


class SessionStatus(Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    SWITCHED = "switched"
    COMPLETED = "completed"


class EngineLifecycle(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    TORN_DOWN = "torn_down"


# ── state ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ActiveSession:
    """In-flight mirror of one durable ``WorkSession`` row."""
    session_id: str
    task_id: str
    start_time: datetime
    last_update_time: datetime
    status: SessionStatus = SessionStatus.ACTIVE


@dataclass
class TimerState:
    mode: TimerMode = TimerMode.WORK
    remaining_seconds: int = 25 * 60
    total_seconds: int = 25 * 60
    is_running: bool = False
    sessions_completed_in_cycle: int = 0
    current_task_id: Optional[str] = None
    current_task: Optional[Task] = None     # resolved or cached, display only
    active_session: Optional[ActiveSession] = None
    session_start_timer_position: Optional[int] = None
    last_counted_minute: Optional[int] = None
    is_active_device: bool = True
    settings: TimerSettings = field(default_factory=TimerSettings)

    @classmethod
    def initial(cls, settings: TimerSettings) -> "TimerState":
        seconds = settings.seconds_for(TimerMode.WORK)
        return cls(remaining_seconds=seconds, total_seconds=seconds, settings=settings)

    @property
    def current_minute(self) -> int:
        return self.remaining_seconds // 60

    @property
    def is_at_default(self) -> bool:
        """Untouched countdown: nothing started, nothing completed."""
        return (
            self.remaining_seconds == self.total_seconds
            and not self.is_running
            and self.sessions_completed_in_cycle == 0
        )

    def copy(self) -> "TimerState":
        return replace(self, settings=replace(self.settings))


# ── record form ───────────────────────────────────────────────────────────


def state_to_record(state: TimerState) -> dict[str, Any]:
    """Flatten *state* into the dict both persistence tiers store.

    The first block of keys is what the durable tier keeps; the rest only
    matter to the local snapshot.
    """
    session = state.active_session
    return {
        "mode": state.mode.value,
        "remaining_seconds": state.remaining_seconds,
        "total_seconds": state.total_seconds,
        "is_running": state.is_running,
        "sessions_completed": state.sessions_completed_in_cycle,
        "current_task_id": state.current_task_id,
        "active_session_id": session.session_id if session else None,
        "session_start_time": session.start_time if session else None,
        # local only
        "current_task": state.current_task.display_fields() if state.current_task else None,
        "active_session": {
            "session_id": session.session_id,
            "task_id": session.task_id,
            "start_time": session.start_time,
            "last_update_time": session.last_update_time,
            "status": session.status.value,
        } if session else None,
        "session_start_timer_position": state.session_start_timer_position,
        "last_counted_minute": state.last_counted_minute,
        "settings": asdict(state.settings),
    }


def record_mode(record: Mapping[str, Any]) -> TimerMode:
    value = record.get("mode") or TimerMode.WORK.value
    if value == "pomodoro":  # legacy name
        value = TimerMode.WORK.value
    return TimerMode(value)


def record_int(record: Mapping[str, Any], key: str, default: int) -> int:
    value = record.get(key)
    if value is None:
        return default
    return max(0, int(value))
