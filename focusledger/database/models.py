"""SQLAlchemy ORM models for the durable tier."""

from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text
)
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Naive UTC now; SQLite drops tzinfo so every stored time is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class WorkSession(Base):
    """One continuous run of tracked time against a task.

    ``duration`` only ever grows through whole-minute increments.
    """

    __tablename__ = "work_sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    task_id = Column(String(128), nullable=False, index=True)
    project_id = Column(String(128), nullable=True)
    duration = Column(Integer, nullable=False, default=0)          # minutes
    session_type = Column(String(20), nullable=False, default="work")  # work | shortBreak | longBreak
    status = Column(String(20), nullable=False, default="active", index=True)  # active | paused | switched | completed
    start_time = Column(DateTime, nullable=False, default=utcnow)
    end_time = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    date = Column(String(10), nullable=False)                      # YYYY-MM-DD of start
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<WorkSession id={self.id} task={self.task_id} "
            f"status={self.status} duration={self.duration}m>"
        )


class TimerStateRecord(Base):
    """Remote copy of one user's timer, used for cross-device recovery."""

    __tablename__ = "timer_states"

    user_id = Column(String(128), primary_key=True)
    mode = Column(String(20), nullable=False, default="work")
    remaining_seconds = Column(Integer, nullable=False, default=25 * 60)
    total_seconds = Column(Integer, nullable=False, default=25 * 60)
    is_running = Column(Boolean, nullable=False, default=False)
    sessions_completed = Column(Integer, nullable=False, default=0)
    current_task_id = Column(String(128), nullable=True)
    active_session_id = Column(String(64), nullable=True)
    session_start_time = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<TimerStateRecord user={self.user_id} mode={self.mode} "
            f"remaining={self.remaining_seconds} running={self.is_running}>"
        )
