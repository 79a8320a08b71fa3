"""Timer package."""

from .engine import TimerEngine
from .heartbeat import Heartbeat
from .state import (
    ActiveSession,
    EngineLifecycle,
    SessionStatus,
    TimerMode,
    TimerState,
    state_to_record,
)

__all__ = [
    "TimerEngine",
    "Heartbeat",
    "ActiveSession",
    "EngineLifecycle",
    "SessionStatus",
    "TimerMode",
    "TimerState",
    "state_to_record",
]
