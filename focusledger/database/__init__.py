"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import WorkSession, TimerStateRecord, utcnow

__all__ = ["configure_engine", "get_session", "init_db", "WorkSession", "TimerStateRecord", "utcnow"]
