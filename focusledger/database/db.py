"""Database connection and session management."""

from contextlib import contextmanager

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..settings import APP_SUPPORT_DIR
from .models import Base

# ── paths ────────────────────────────────────────────────────────────────────

DB_PATH = APP_SUPPORT_DIR / "focusledger.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(
            f"sqlite:///{DB_PATH}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    an in-memory SQLite database, and by hosts with a shared database."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
        echo=False,
    )


def _run_migrations(engine) -> None:
    """Schema migrations for existing databases.

    Runs after ``create_all`` so new columns exist in fresh installs.
    Each migration is idempotent.
    """
    insp = inspect(engine)
    table_names = set(insp.get_table_names())

    with engine.connect() as conn:
        # ── M1: add notes column to work_sessions ──────────────────────
        if "work_sessions" in table_names:
            columns = {c["name"] for c in insp.get_columns("work_sessions")}
            if "notes" not in columns:
                conn.execute(text(
                    "ALTER TABLE work_sessions ADD COLUMN notes TEXT"
                ))

        # ── M2: remember the in-flight session on the timer snapshot ───
        if "timer_states" in table_names:
            columns = {c["name"] for c in insp.get_columns("timer_states")}
            if "active_session_id" not in columns:
                conn.execute(text(
                    "ALTER TABLE timer_states "
                    "ADD COLUMN active_session_id VARCHAR(64)"
                ))

        # ── M3: legacy 'pomodoro' session type → 'work' ────────────────
        if "work_sessions" in table_names:
            conn.execute(text(
                "UPDATE work_sessions SET session_type = 'work' "
                "WHERE session_type = 'pomodoro'"
            ))
        if "timer_states" in table_names:
            conn.execute(text(
                "UPDATE timer_states SET mode = 'work' WHERE mode = 'pomodoro'"
            ))

        conn.commit()


def init_db() -> None:
    """Create all tables and run migrations."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    _run_migrations(engine)


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
