"""Local snapshot store for instant reload recovery.

A synchronous key → JSON-blob store on the same device.  Durability is
best effort: the user may clear the directory at any time, and a blob
that fails to decode is dropped rather than repaired.

Snapshots are stored at:
    $FOCUSLEDGER_HOME/snapshots/<key>.json
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from .errors import SnapshotCorruptedError
from .settings import APP_SUPPORT_DIR

logger = logging.getLogger("focusledger.snapshot")

SNAPSHOT_DIR = APP_SUPPORT_DIR / "snapshots"

TIMER_STATE_KEY = "timer_state"
LAST_SYNC_KEY = "timer_last_sync"

# Keys in a timer record whose values are datetimes.
_TIME_KEYS = ("session_start_time", "saved_at", "updated_at")
_SESSION_TIME_KEYS = ("start_time", "last_update_time")

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class SnapshotStore(Protocol):
    """Synchronous, same-device key/value store."""
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, blob: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemorySnapshotStore:
    """Process-local store; also the test double."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        self._data[key] = blob

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileSnapshotStore:
    """One JSON file per key under *directory*."""

    def __init__(self, directory: Path | None = None) -> None:
        self._dir = directory or SNAPSHOT_DIR

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"invalid snapshot key: {key!r}")
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read snapshot %s: %s", key, exc)
            return None

    def set(self, key: str, blob: str) -> None:
        path = self._path(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(blob, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            logger.warning("Could not write snapshot %s: %s", key, exc)

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove snapshot %s: %s", key, exc)


# ── codec ─────────────────────────────────────────────────────────────────


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _from_iso(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise SnapshotCorruptedError(f"bad timestamp {value!r}") from exc


def encode_snapshot(record: Mapping[str, Any], saved_at: datetime) -> str:
    """Serialise a timer record (see ``state_to_record``) to JSON."""
    data = dict(record)
    for key in _TIME_KEYS:
        if key in data:
            data[key] = _to_iso(data[key])
    session = data.get("active_session")
    if session:
        session = dict(session)
        for key in _SESSION_TIME_KEYS:
            session[key] = _to_iso(session.get(key))
        data["active_session"] = session
    data["saved_at"] = saved_at.isoformat()
    return json.dumps(data)


def decode_snapshot(blob: str) -> dict[str, Any]:
    """Parse a blob written by :func:`encode_snapshot`.

    Raises :class:`SnapshotCorruptedError` for anything unparsable.
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise SnapshotCorruptedError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict) or "remaining_seconds" not in data:
        raise SnapshotCorruptedError("snapshot is not a timer record")

    for key in _TIME_KEYS:
        if key in data:
            data[key] = _from_iso(data[key])
    session = data.get("active_session")
    if session is not None:
        if not isinstance(session, dict) or not session.get("session_id"):
            raise SnapshotCorruptedError("malformed active_session")
        for key in _SESSION_TIME_KEYS:
            session[key] = _from_iso(session.get(key))
    return data


def encode_timestamp(value: datetime) -> str:
    return value.isoformat()


def decode_timestamp(blob: Optional[str]) -> Optional[datetime]:
    """Parse a bare ISO timestamp blob; junk reads as "never"."""
    if not blob:
        return None
    try:
        return datetime.fromisoformat(blob.strip())
    except ValueError:
        logger.warning("Ignoring unparsable timestamp blob %r", blob)
        return None
