"""Durable tier: work-session records and the remote timer snapshot.

Both stores are thin SQLAlchemy adapters over :func:`get_session`.  Every
``SQLAlchemyError`` is re-raised as :class:`SessionStoreError` so callers
only deal with one failure type.

Durations are never read-modify-written: ``increment_duration`` issues a
single ``UPDATE ... SET duration = duration + :n`` so concurrent writers
from two devices add up instead of overwriting each other.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import TimerStateRecord, WorkSession, utcnow
from ..errors import SessionNotFoundError, SessionStoreError

logger = logging.getLogger("focusledger.store")

ACTIVE = "active"

# Fields callers may change through ``update_session``.
_UPDATABLE_FIELDS = frozenset({"status", "end_time", "notes", "project_id"})

_TIMER_STATE_FIELDS = (
    "mode",
    "remaining_seconds",
    "total_seconds",
    "is_running",
    "sessions_completed",
    "current_task_id",
    "active_session_id",
    "session_start_time",
)


@dataclass(frozen=True)
class WorkSessionInfo:
    """Detached, read-only view of a ``WorkSession`` row."""
    id: str
    user_id: str
    task_id: str
    project_id: Optional[str]
    duration: int
    session_type: str
    status: str
    start_time: datetime
    end_time: Optional[datetime]
    notes: Optional[str]
    updated_at: datetime

    @classmethod
    def from_row(cls, row: WorkSession) -> "WorkSessionInfo":
        return cls(
            id=row.id,
            user_id=row.user_id,
            task_id=row.task_id,
            project_id=row.project_id,
            duration=row.duration,
            session_type=row.session_type,
            status=row.status,
            start_time=row.start_time,
            end_time=row.end_time,
            notes=row.notes,
            updated_at=row.updated_at,
        )


class SessionStore(Protocol):
    """Durable store of work sessions, shared across devices."""
    def create_session(self, fields: Mapping[str, Any]) -> str:
        ...

    def increment_duration(self, session_id: str, minutes: int) -> None:
        ...

    def update_session(self, session_id: str, fields: Mapping[str, Any]) -> None:
        ...

    def get_session(self, session_id: str) -> Optional[WorkSessionInfo]:
        ...

    def get_active_sessions(self, user_id: str) -> list[WorkSessionInfo]:
        ...

    def cleanup_orphaned_sessions(
        self,
        user_id: str,
        *,
        exclude: Iterable[str] = (),
        stale_before: Optional[datetime] = None,
    ) -> int:
        ...


class TimerStateStore(Protocol):
    """Durable per-user copy of the timer used for reload/device recovery."""
    def load_timer_state(self, user_id: str) -> Optional[dict[str, Any]]:
        ...

    def save_timer_state(self, user_id: str, data: Mapping[str, Any]) -> None:
        ...


class SqlSessionStore:
    """``SessionStore`` backed by the ``work_sessions`` table.

    *clock* stamps every stored time and must be the engine's clock,
    since the engine compares its own times against ``updated_at``.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def create_session(self, fields: Mapping[str, Any]) -> str:
        """Insert a new session and return the id the store assigned."""
        for required in ("user_id", "task_id"):
            if not fields.get(required):
                raise SessionStoreError(f"create_session requires {required!r}")

        now = self._clock()
        start_time = fields.get("start_time") or now
        session_id = uuid.uuid4().hex
        try:
            with get_session() as db:
                db.add(WorkSession(
                    id=session_id,
                    user_id=fields["user_id"],
                    task_id=fields["task_id"],
                    project_id=fields.get("project_id"),
                    duration=int(fields.get("duration", 0)),
                    session_type=fields.get("session_type", "work"),
                    status=fields.get("status", ACTIVE),
                    start_time=start_time,
                    notes=fields.get("notes"),
                    date=start_time.date().isoformat(),
                    created_at=now,
                    updated_at=now,
                ))
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not create session: {exc}") from exc

        logger.debug("Created work session %s for task %s", session_id, fields["task_id"])
        return session_id

    def increment_duration(self, session_id: str, minutes: int) -> None:
        if minutes <= 0:
            return
        try:
            with get_session() as db:
                updated = (
                    db.query(WorkSession)
                    .filter(WorkSession.id == session_id)
                    .update(
                        {
                            WorkSession.duration: WorkSession.duration + minutes,
                            WorkSession.updated_at: self._clock(),
                        },
                        synchronize_session=False,
                    )
                )
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not increment {session_id}: {exc}") from exc
        if not updated:
            raise SessionNotFoundError(session_id)

    def update_session(self, session_id: str, fields: Mapping[str, Any]) -> None:
        """Change status/end time/notes.  Never touches ``duration``."""
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise SessionStoreError(f"fields not updatable: {sorted(unknown)}")
        try:
            with get_session() as db:
                row = db.get(WorkSession, session_id)
                if row is None:
                    raise SessionNotFoundError(session_id)
                for key, value in fields.items():
                    setattr(row, key, value)
                row.updated_at = self._clock()
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not update {session_id}: {exc}") from exc

    def get_session(self, session_id: str) -> Optional[WorkSessionInfo]:
        try:
            with get_session() as db:
                row = db.get(WorkSession, session_id)
                return WorkSessionInfo.from_row(row) if row else None
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not read {session_id}: {exc}") from exc

    def get_active_sessions(self, user_id: str) -> list[WorkSessionInfo]:
        try:
            with get_session() as db:
                rows = (
                    db.query(WorkSession)
                    .filter(WorkSession.user_id == user_id, WorkSession.status == ACTIVE)
                    .order_by(WorkSession.start_time)
                    .all()
                )
                return [WorkSessionInfo.from_row(r) for r in rows]
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not query active sessions: {exc}") from exc

    def get_sessions_by_task(self, user_id: str, task_id: str) -> list[WorkSessionInfo]:
        try:
            with get_session() as db:
                rows = (
                    db.query(WorkSession)
                    .filter(WorkSession.user_id == user_id, WorkSession.task_id == task_id)
                    .order_by(WorkSession.start_time)
                    .all()
                )
                return [WorkSessionInfo.from_row(r) for r in rows]
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not query task sessions: {exc}") from exc

    def cleanup_orphaned_sessions(
        self,
        user_id: str,
        *,
        exclude: Iterable[str] = (),
        stale_before: Optional[datetime] = None,
    ) -> int:
        """Close sessions left ``active`` and return how many were closed.

        The stored ``duration`` is kept as-is; only increments count.
        Sessions in *exclude*, or updated at or after *stale_before*, are
        left alone.
        """
        keep = set(exclude)
        now = self._clock()
        cleaned = 0
        try:
            with get_session() as db:
                query = db.query(WorkSession).filter(
                    WorkSession.user_id == user_id,
                    WorkSession.status == ACTIVE,
                )
                if stale_before is not None:
                    query = query.filter(WorkSession.updated_at < stale_before)
                for row in query.all():
                    if row.id in keep:
                        continue
                    row.status = "completed"
                    row.end_time = now
                    row.notes = f"{row.session_type} session closed by cleanup"
                    row.updated_at = now
                    cleaned += 1
                    logger.info(
                        "Closed orphaned session %s (duration %sm kept)",
                        row.id, row.duration,
                    )
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not clean up sessions: {exc}") from exc
        return cleaned


class SqlTimerStateStore:
    """``TimerStateStore`` backed by the ``timer_states`` table."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def load_timer_state(self, user_id: str) -> Optional[dict[str, Any]]:
        try:
            with get_session() as db:
                row = db.get(TimerStateRecord, user_id)
                if row is None:
                    return None
                data = {name: getattr(row, name) for name in _TIMER_STATE_FIELDS}
                data["updated_at"] = row.updated_at
                return data
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not load timer state: {exc}") from exc

    def save_timer_state(self, user_id: str, data: Mapping[str, Any]) -> None:
        """Upsert the user's timer snapshot with the full current state."""
        try:
            with get_session() as db:
                row = db.get(TimerStateRecord, user_id)
                if row is None:
                    row = TimerStateRecord(user_id=user_id)
                    db.add(row)
                for name in _TIMER_STATE_FIELDS:
                    if name in data:
                        setattr(row, name, data[name])
                row.updated_at = self._clock()
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not save timer state: {exc}") from exc
