"""Durable session store package."""

from .store import (
    SessionStore,
    TimerStateStore,
    SqlSessionStore,
    SqlTimerStateStore,
    WorkSessionInfo,
)

__all__ = [
    "SessionStore",
    "TimerStateStore",
    "SqlSessionStore",
    "SqlTimerStateStore",
    "WorkSessionInfo",
]
