"""Timer and work-session accounting engine.

Modes
-----
WORK          Work countdown; the only mode that credits minutes.
SHORT_BREAK   Short break countdown.
LONG_BREAK    Long break countdown, every ``long_break_interval`` works.

Transitions (``skip``, either explicit or when the countdown hits zero)
-----------
WORK → SHORT_BREAK | LONG_BREAK
SHORT_BREAK | LONG_BREAK → WORK

Minute accounting
-----------------
The countdown runs down, so a minute boundary is crossed when
``remaining_seconds // 60`` drops below ``last_counted_minute``.  Each
crossing issues one increment against the durable work session and the
same credit to the task's local ``time_spent``.  Nothing ever recomputes
a duration from wall-clock deltas.

Persistence
-----------
Local snapshot on every tick and every action.  Durable timer snapshot on
every action and at most once per minute while ticking.  Only the active
device writes durable state, and no failure in either tier stops the
countdown.

Device arbitration is advisory: ``start()`` claims the device, there is
no lock or lease, and two devices that both believe they are active will
both write (last writer wins).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..database.models import utcnow
from ..errors import (
    SessionNotFoundError,
    SessionStoreError,
    SettingsError,
    SnapshotCorruptedError,
)
from ..sessions.store import SessionStore, TimerStateStore
from ..settings import EngineConfig, TimerSettings, settings_from_dict
from ..snapshot import (
    LAST_SYNC_KEY,
    TIMER_STATE_KEY,
    SnapshotStore,
    decode_snapshot,
    decode_timestamp,
    encode_snapshot,
    encode_timestamp,
)
from ..tasks import Task, TaskLookup
from .state import (
    ActiveSession,
    EngineLifecycle,
    SessionStatus,
    TimerMode,
    TimerState,
    record_int,
    record_mode,
    state_to_record,
)

Scheduler = Callable[[int, Callable[[], None]], None]


def _qt_single_shot(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Pomodoro countdown that turns elapsed work into durable minutes.

    Signals
    -------
    changed(state: TimerState)
        Emitted after every state change, with a copy of the state.
    mode_changed(mode: TimerMode)
        Emitted when the countdown enters a new mode.
    session_started(data: dict)
        Keys: ``session_id``, ``task_id``, ``mode``, ``adopted``.
    session_finished(data: dict)
        Keys: ``session_id``, ``task_id``, ``status``, ``flushed_minutes``.
    minute_credited(task_id: str, minutes: int)
        Emitted whenever work minutes are credited.
    lifecycle_changed(lifecycle: EngineLifecycle)
    """

    changed = pyqtSignal(object)
    mode_changed = pyqtSignal(object)
    session_started = pyqtSignal(object)
    session_finished = pyqtSignal(object)
    minute_credited = pyqtSignal(str, int)
    lifecycle_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        session_store: SessionStore,
        state_store: TimerStateStore,
        snapshot_store: SnapshotStore,
        task_lookup: TaskLookup,
        settings: TimerSettings | None = None,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
        scheduler: Scheduler | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(parent)

        # ── collaborators ─────────────────────────────────────────────
        self._sessions = session_store
        self._remote = state_store
        self._snapshots = snapshot_store
        self._tasks = task_lookup
        self._clock = clock
        self._schedule: Scheduler = scheduler or _qt_single_shot
        self._logger = logger or logging.getLogger("focusledger.engine")

        # ── configuration ─────────────────────────────────────────────
        self._config: EngineConfig = config or EngineConfig()

        # ── state ─────────────────────────────────────────────────────
        self._state = TimerState.initial((settings or TimerSettings()).validate())
        self._user_id: str | None = None
        self._lifecycle = EngineLifecycle.UNINITIALIZED

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        """A copy of the current state."""
        return self._state.copy()

    @property
    def lifecycle(self) -> EngineLifecycle:
        return self._lifecycle

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def mode(self) -> TimerMode:
        return self._state.mode

    @property
    def remaining(self) -> int:
        return self._state.remaining_seconds

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def active_session(self) -> ActiveSession | None:
        return self._state.active_session

    @property
    def settings(self) -> TimerSettings:
        return replace(self._state.settings)

    def on_change(self, listener: Callable[[TimerState], None]) -> Callable[[], None]:
        """Subscribe *listener* to ``changed``; returns an unsubscribe callable."""
        self.changed.connect(listener)

        def unsubscribe() -> None:
            try:
                self.changed.disconnect(listener)
            except TypeError:
                pass  # already disconnected

        return unsubscribe

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Run the countdown, claiming this device as the active one."""
        s = self._state
        if not s.is_active_device:
            self._logger.info("Taking over as the active device")
            s.is_active_device = True

        if not s.is_running and s.current_task_id and s.active_session is None:
            self.create_active_session()

        s.is_running = True
        self._persist()

    def pause(self) -> None:
        s = self._state
        if s.active_session is not None:
            self.complete_active_session(SessionStatus.PAUSED)
        s.is_running = False
        self._persist()

    def reset(self) -> None:
        """Stop and rewind the current mode to its full duration."""
        if self._state.active_session is not None:
            self.complete_active_session(SessionStatus.PAUSED)
        self._enter_mode(self._state.mode)
        self._state.is_running = False
        self._persist()

    def skip(self) -> None:
        """Finish the current mode and move to the next one."""
        s = self._state
        if s.active_session is not None:
            self.complete_active_session(SessionStatus.COMPLETED)

        if s.mode is TimerMode.WORK:
            s.sessions_completed_in_cycle += 1
            if s.sessions_completed_in_cycle % s.settings.long_break_interval == 0:
                next_mode = TimerMode.LONG_BREAK
            else:
                next_mode = TimerMode.SHORT_BREAK
        else:
            next_mode = TimerMode.WORK

        self._enter_mode(next_mode)
        if next_mode is TimerMode.WORK:
            s.is_running = s.settings.auto_start_pomodoros
        else:
            s.is_running = s.settings.auto_start_breaks
        self._logger.info(
            "Mode %s (cycle count %d, auto-start=%s)",
            next_mode.value, s.sessions_completed_in_cycle, s.is_running,
        )
        self.mode_changed.emit(next_mode)

        if s.is_running and s.current_task_id:
            self.create_active_session()
        self._persist()

    def tick(self) -> None:
        """Advance the countdown by one second.

        Called by the host heartbeat while running; a no-op unless this
        device is the active one.
        """
        s = self._state
        if not (s.is_running and s.is_active_device):
            return

        if s.mode is TimerMode.WORK and s.active_session is not None:
            current_minute = s.current_minute
            last = s.last_counted_minute
            if last is not None and current_minute < last:
                self._credit_minutes(last - current_minute)
            s.last_counted_minute = current_minute

        if s.remaining_seconds > 0:
            s.remaining_seconds -= 1
            self._write_local()
            if s.remaining_seconds % 60 == 0:
                self._write_remote()
            self._notify()
        else:
            self.skip()

    def set_mode(self, mode: TimerMode) -> None:
        """Jump to *mode*, stopped, at its full duration."""
        if self._state.active_session is not None:
            self.complete_active_session(SessionStatus.PAUSED)
        self._enter_mode(mode)
        self._state.is_running = False
        self.mode_changed.emit(mode)
        self._persist()

    def set_current_task(self, task: Task | None) -> None:
        """Point the timer at *task*.

        While running, the outgoing session is marked ``switched`` with its
        duration untouched and a fresh session starts for the new task.
        """
        s = self._state
        new_id = task.id if task else None
        if new_id == s.current_task_id:
            if task is not None:
                s.current_task = task
            self._write_local()
            self._notify()
            return

        if s.is_running and s.active_session is not None:
            self.switch_active_session()
            self._assign_task(task)
            if task is not None:
                self.create_active_session()
        else:
            self._assign_task(task)
            if s.is_running and task is not None:
                self.create_active_session()
        self._persist()

    def set_settings(self, settings: TimerSettings) -> None:
        """Replace settings; rewinds the countdown only when untouched."""
        settings = replace(settings).validate()
        s = self._state
        if s.is_at_default:
            s.settings = settings
            seconds = settings.seconds_for(s.mode)
            s.remaining_seconds = seconds
            s.total_seconds = seconds
            s.is_running = False
            self._persist()
        else:
            s.settings = settings
            self._write_local()
            self._notify()

    def set_active_device(self, active: bool) -> None:
        """Host hook for when another device takes over (or hands back)."""
        s = self._state
        if s.is_active_device == active:
            return
        s.is_active_device = active
        if not active:
            # The session now belongs to whichever device took over.
            s.active_session = None
            s.session_start_timer_position = None
            s.last_counted_minute = None
            self._logger.info("Device is no longer active; observing only")
        self._write_local()
        self._notify()

    def apply_remote_state(self, record: Mapping[str, Any]) -> None:
        """Overwrite timer fields with state pushed from another device.

        Last writer wins.  Never writes to the durable tier.
        """
        s = self._state
        keep = s.active_session
        if keep is not None and record.get("active_session_id") != keep.session_id:
            keep = None
        try:
            self._apply_record(record)
        except (KeyError, TypeError, ValueError, SettingsError) as exc:
            self._logger.error("Ignoring malformed pushed state: %s", exc)
            return
        s.active_session = keep
        if keep is None:
            s.last_counted_minute = None
            s.session_start_timer_position = None
        self._write_local()
        self._notify()

    # ══════════════════════════════════════════════════════════════════
    #  SESSION LIFECYCLE
    # ══════════════════════════════════════════════════════════════════

    def create_active_session(self) -> None:
        """Open a durable work session for the current task and mode."""
        s = self._state
        if not s.current_task_id or not s.is_active_device or self._user_id is None:
            return
        if s.active_session is not None:
            self._logger.warning(
                "Session %s still open; not creating another",
                s.active_session.session_id,
            )
            return

        now = self._clock()
        project_id = s.current_task.project_id if s.current_task else None
        try:
            session_id = self._sessions.create_session({
                "user_id": self._user_id,
                "task_id": s.current_task_id,
                "project_id": project_id,
                "duration": 0,
                "session_type": s.mode.value,
                "status": SessionStatus.ACTIVE.value,
                "start_time": now,
            })
        except SessionStoreError as exc:
            self._logger.error(
                "Failed to create session for task %s: %s", s.current_task_id, exc
            )
            s.active_session = None
            return

        s.active_session = ActiveSession(
            session_id=session_id,
            task_id=s.current_task_id,
            start_time=now,
            last_update_time=now,
        )
        s.session_start_timer_position = s.remaining_seconds
        s.last_counted_minute = None
        self._logger.info(
            "Created %s session %s for task %s at %ds",
            s.mode.value, session_id, s.current_task_id, s.remaining_seconds,
        )
        self.session_started.emit({
            "session_id": session_id,
            "task_id": s.current_task_id,
            "mode": s.mode,
            "adopted": False,
        })

    def update_active_session(self, minutes: int = 1) -> None:
        """Add *minutes* to the durable session; one call per boundary."""
        s = self._state
        session = s.active_session
        if session is None or not s.is_active_device or self._user_id is None:
            return
        try:
            self._sessions.increment_duration(session.session_id, minutes)
        except SessionNotFoundError:
            self._logger.warning(
                "Session %s vanished from the store; starting a new one",
                session.session_id,
            )
            s.active_session = None
            self.create_active_session()
            replacement = s.active_session
            if replacement is not None:
                try:
                    self._sessions.increment_duration(replacement.session_id, minutes)
                except SessionStoreError as exc:
                    self._logger.error("Failed to credit %dm: %s", minutes, exc)
            return
        except SessionStoreError as exc:
            self._logger.error(
                "Failed to credit %dm to session %s: %s",
                minutes, session.session_id, exc,
            )
            return

        s.active_session = replace(session, last_update_time=self._clock())
        self._logger.debug("Session %s: +%dm", session.session_id, minutes)

    def switch_active_session(self) -> None:
        """Close the current session as ``switched`` without touching duration."""
        s = self._state
        session = s.active_session
        if session is None:
            return

        if s.is_active_device and self._user_id is not None:
            try:
                self._sessions.update_session(session.session_id, {
                    "status": SessionStatus.SWITCHED.value,
                    "end_time": self._clock(),
                    "notes": "Task switched",
                })
            except SessionStoreError as exc:
                self._logger.error(
                    "Failed to mark session %s switched: %s", session.session_id, exc
                )

        self._clear_session()
        self.session_finished.emit({
            "session_id": session.session_id,
            "task_id": session.task_id,
            "status": SessionStatus.SWITCHED,
            "flushed_minutes": 0,
        })

    def complete_active_session(self, status: SessionStatus) -> None:
        """Flush any uncounted minute, then close the session with *status*."""
        s = self._state
        session = s.active_session
        if session is None:
            return

        flushed = 0
        if s.last_counted_minute is not None:
            flushed = max(0, s.last_counted_minute - s.current_minute)

        if s.is_active_device and self._user_id is not None:
            if flushed:
                try:
                    self._sessions.increment_duration(session.session_id, flushed)
                except SessionStoreError as exc:
                    self._logger.error(
                        "Failed to flush %dm to session %s: %s",
                        flushed, session.session_id, exc,
                    )
            notes = f"{s.mode.value} session {status.value}"
            if flushed:
                notes += f": +{flushed}m remaining"
            try:
                self._sessions.update_session(session.session_id, {
                    "status": status.value,
                    "end_time": self._clock(),
                    "notes": notes,
                })
            except SessionStoreError as exc:
                self._logger.error(
                    "Failed to mark session %s %s: %s",
                    session.session_id, status.value, exc,
                )
            if flushed and s.current_task_id:
                self._tasks.increment_time_spent(s.current_task_id, flushed)
                self.minute_credited.emit(s.current_task_id, flushed)

        self._logger.info(
            "Session %s %s (+%dm flushed)", session.session_id, status.value, flushed
        )
        self._clear_session()
        self.session_finished.emit({
            "session_id": session.session_id,
            "task_id": session.task_id,
            "status": status,
            "flushed_minutes": flushed,
        })

    def cleanup_orphaned_sessions(self) -> int:
        """Close this user's sessions left ``active`` by dead devices.

        Best effort: failures are logged and reported as zero.
        """
        if self._user_id is None:
            return 0
        keep = ()
        if self._state.active_session is not None:
            keep = (self._state.active_session.session_id,)
        stale_before = None
        if self._config.orphan_after_seconds > 0:
            stale_before = self._clock() - timedelta(
                seconds=self._config.orphan_after_seconds
            )
        try:
            cleaned = self._sessions.cleanup_orphaned_sessions(
                self._user_id, exclude=keep, stale_before=stale_before
            )
        except SessionStoreError as exc:
            self._logger.warning("Orphaned session cleanup failed: %s", exc)
            return 0
        if cleaned:
            self._logger.info("Cleaned up %d orphaned sessions", cleaned)
        return cleaned

    # ══════════════════════════════════════════════════════════════════
    #  PERSISTENCE & RECONCILIATION
    # ══════════════════════════════════════════════════════════════════

    def on_auth_changed(self, user_id: str | None) -> None:
        """Authentication signal: a user id to sign in, ``None`` to sign out."""
        if user_id is None:
            if self._lifecycle is not EngineLifecycle.TORN_DOWN:
                self.teardown()
            return
        if user_id == self._user_id and self._lifecycle in (
            EngineLifecycle.INITIALIZING, EngineLifecycle.READY
        ):
            return
        if self._user_id is not None:
            self.teardown()
        self.initialize_persistence(user_id)

    def initialize_persistence(self, user_id: str) -> None:
        """Recover state for *user_id*: local snapshot first, then remote."""
        if self._lifecycle is EngineLifecycle.INITIALIZING:
            self._logger.warning("Persistence already initializing; ignored")
            return
        self._user_id = user_id
        self._set_lifecycle(EngineLifecycle.INITIALIZING)

        # 1. local snapshot, rendered immediately
        record = self._load_local_snapshot()
        self._notify()

        # 2. remote snapshot, at most once per sync window
        now = self._clock()
        last_sync = decode_timestamp(self._snapshots.get(LAST_SYNC_KEY))
        window = timedelta(seconds=self._config.remote_sync_interval_seconds)
        if last_sync is None or now - last_sync > window:
            remote = self._fetch_remote()
            if remote is not None and self._remote_is_newer(remote, record):
                try:
                    self._apply_record(remote)
                    record = remote
                except (KeyError, TypeError, ValueError, SettingsError) as exc:
                    self._logger.error("Ignoring malformed remote state: %s", exc)
        else:
            self._logger.debug("Remote state synced %s; using local snapshot", last_sync)

        # 3. task and session recovery
        if self._state.current_task_id:
            self._resolve_task(self._state.current_task_id, attempt=1)
        if record is not None:
            self._resume_session(record)

        self.cleanup_orphaned_sessions()
        self._set_lifecycle(EngineLifecycle.READY)
        self._logger.info(
            "Persistence ready for %s (mode=%s, running=%s, session=%s)",
            user_id,
            self._state.mode.value,
            self._state.is_running,
            self._state.active_session.session_id if self._state.active_session else None,
        )
        self._persist()

    def teardown(self) -> None:
        """Sign-out: forget the user and return to a fresh timer."""
        settings = self._state.settings
        self._user_id = None
        self._state = TimerState.initial(settings)
        self._snapshots.remove(TIMER_STATE_KEY)
        self._snapshots.remove(LAST_SYNC_KEY)
        self._set_lifecycle(EngineLifecycle.TORN_DOWN)
        self._notify()

    def _load_local_snapshot(self) -> dict[str, Any] | None:
        blob = self._snapshots.get(TIMER_STATE_KEY)
        if blob is None:
            return None
        try:
            record = decode_snapshot(blob)
            self._apply_record(record)
        except (SnapshotCorruptedError, KeyError, TypeError, ValueError, SettingsError) as exc:
            self._logger.warning("Dropping corrupted local snapshot: %s", exc)
            self._snapshots.remove(TIMER_STATE_KEY)
            self._state = TimerState.initial(self._state.settings)
            return None
        return record

    def _fetch_remote(self) -> dict[str, Any] | None:
        try:
            remote = self._remote.load_timer_state(self._user_id)
        except SessionStoreError as exc:
            self._logger.error("Failed to load remote timer state: %s", exc)
            return None
        self._snapshots.set(LAST_SYNC_KEY, encode_timestamp(self._clock()))
        return remote

    @staticmethod
    def _remote_is_newer(remote: Mapping[str, Any], local: Mapping[str, Any] | None) -> bool:
        if local is None:
            return True
        remote_at, local_at = remote.get("updated_at"), local.get("saved_at")
        if remote_at is None or local_at is None:
            return True
        return remote_at >= local_at

    def _apply_record(self, record: Mapping[str, Any]) -> None:
        """Load timer fields from a stored record.  Never adopts a session.

        Every field is parsed before any is assigned, so a record that
        raises leaves the state untouched.
        """
        s = self._state
        settings = s.settings
        if record.get("settings"):
            settings = settings_from_dict(record["settings"])
        mode = record_mode(record)
        total = record_int(record, "total_seconds", settings.seconds_for(mode))
        remaining = min(record_int(record, "remaining_seconds", total), total)
        sessions_completed = record_int(record, "sessions_completed", 0)

        task_id = record.get("current_task_id")
        cached = record.get("current_task")
        current_task = None
        if task_id and isinstance(cached, Mapping) and cached.get("id") == task_id:
            current_task = Task.from_display_fields(cached)
        elif task_id and s.current_task is not None and s.current_task.id == task_id:
            current_task = s.current_task

        last_counted = record.get("last_counted_minute")
        if last_counted is not None:
            last_counted = int(last_counted)
        position = record.get("session_start_timer_position")
        if position is not None:
            position = int(position)

        s.settings = settings
        s.mode = mode
        s.total_seconds = total
        s.remaining_seconds = remaining
        s.is_running = bool(record.get("is_running", False))
        s.sessions_completed_in_cycle = sessions_completed
        s.current_task_id = task_id or None
        s.current_task = current_task
        s.active_session = None
        s.last_counted_minute = last_counted
        s.session_start_timer_position = position

    def _resume_session(self, record: Mapping[str, Any]) -> None:
        """Re-attach to the remembered session, or open a fresh one."""
        s = self._state
        if not (s.is_running and s.current_task_id and s.is_active_device):
            return

        session_id = record.get("active_session_id")
        if session_id:
            try:
                info = self._sessions.get_session(session_id)
            except SessionStoreError as exc:
                self._logger.error("Could not verify session %s: %s", session_id, exc)
                info = None
            if (
                info is not None
                and info.status == SessionStatus.ACTIVE.value
                and info.task_id == s.current_task_id
            ):
                s.active_session = ActiveSession(
                    session_id=info.id,
                    task_id=info.task_id,
                    start_time=info.start_time,
                    last_update_time=self._clock(),
                )
                if s.session_start_timer_position is None:
                    s.session_start_timer_position = s.remaining_seconds
                self._logger.info("Resumed session %s (%dm so far)", info.id, info.duration)
                self.session_started.emit({
                    "session_id": info.id,
                    "task_id": info.task_id,
                    "mode": s.mode,
                    "adopted": True,
                })
                return
            self._logger.warning(
                "Remembered session %s is gone or closed; starting a new one", session_id
            )

        self.create_active_session()

    def _resolve_task(self, task_id: str, attempt: int) -> None:
        """Look the task up, retrying with exponential backoff."""
        s = self._state
        if s.current_task_id != task_id or self._lifecycle is EngineLifecycle.TORN_DOWN:
            return
        task = self._tasks.find_task(task_id)
        if task is not None:
            s.current_task = task
            if attempt > 1:
                self._logger.info("Resolved task %s on attempt %d", task_id, attempt)
                self._write_local()
                self._notify()
            return

        if attempt >= self._config.task_lookup_attempts:
            self._logger.warning(
                "Task %s unresolved after %d attempts; using cached fields",
                task_id, attempt,
            )
            return
        delay_ms = self._config.task_lookup_base_delay_ms * 2 ** (attempt - 1)
        self._logger.debug("Task %s not loaded yet; retrying in %dms", task_id, delay_ms)
        self._schedule(delay_ms, lambda: self._resolve_task(task_id, attempt + 1))

    def _write_local(self) -> None:
        record = state_to_record(self._state)
        self._snapshots.set(TIMER_STATE_KEY, encode_snapshot(record, self._clock()))

    def _write_remote(self) -> None:
        if self._user_id is None or not self._state.is_active_device:
            return
        try:
            self._remote.save_timer_state(self._user_id, state_to_record(self._state))
        except SessionStoreError as exc:
            self._logger.error("Failed to save remote timer state: %s", exc)
            return
        self._logger.debug("Saved remote timer state at %ds", self._state.remaining_seconds)

    def _persist(self) -> None:
        self._write_local()
        self._write_remote()
        self._notify()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _credit_minutes(self, minutes: int) -> None:
        s = self._state
        self.update_active_session(minutes)
        if s.current_task_id:
            self._tasks.increment_time_spent(s.current_task_id, minutes)
            self.minute_credited.emit(s.current_task_id, minutes)

    def _assign_task(self, task: Task | None) -> None:
        s = self._state
        s.current_task_id = task.id if task else None
        s.current_task = task
        s.last_counted_minute = None
        s.session_start_timer_position = None

    def _enter_mode(self, mode: TimerMode) -> None:
        s = self._state
        seconds = s.settings.seconds_for(mode)
        s.mode = mode
        s.remaining_seconds = seconds
        s.total_seconds = seconds
        self._clear_session()

    def _clear_session(self) -> None:
        s = self._state
        s.active_session = None
        s.session_start_timer_position = None
        s.last_counted_minute = None

    def _set_lifecycle(self, lifecycle: EngineLifecycle) -> None:
        self._lifecycle = lifecycle
        self.lifecycle_changed.emit(lifecycle)

    def _notify(self) -> None:
        self.changed.emit(self._state.copy())
