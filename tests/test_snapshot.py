"""Tests for the local snapshot store and its JSON codec."""

import json
from datetime import datetime

import pytest

from focusledger.errors import SnapshotCorruptedError
from focusledger.settings import TimerSettings
from focusledger.snapshot import (
    TIMER_STATE_KEY,
    FileSnapshotStore,
    MemorySnapshotStore,
    decode_snapshot,
    decode_timestamp,
    encode_snapshot,
    encode_timestamp,
)
from focusledger.tasks import Task
from focusledger.timer.state import ActiveSession, TimerMode, TimerState, state_to_record

SAVED_AT = datetime(2024, 1, 1, 9, 30)


def _running_state():
    state = TimerState.initial(TimerSettings(work=50))
    state.is_running = True
    state.remaining_seconds = 1234
    state.last_counted_minute = 20
    state.session_start_timer_position = 3000
    state.current_task_id = "t1"
    state.current_task = Task(id="t1", title="Write report", project_id="p1")
    state.active_session = ActiveSession(
        session_id="s1",
        task_id="t1",
        start_time=datetime(2024, 1, 1, 9, 0),
        last_update_time=datetime(2024, 1, 1, 9, 29),
    )
    return state


# ═══════════════════════════════════════════════════════════════════════════
#  CODEC
# ═══════════════════════════════════════════════════════════════════════════


class TestCodec:

    def test_blob_is_plain_json(self):
        blob = encode_snapshot(state_to_record(_running_state()), SAVED_AT)
        data = json.loads(blob)
        assert data["saved_at"] == "2024-01-01T09:30:00"
        assert data["active_session"]["start_time"] == "2024-01-01T09:00:00"
        assert data["settings"]["work"] == 50

    def test_decode_restores_datetimes(self):
        blob = encode_snapshot(state_to_record(_running_state()), SAVED_AT)
        data = decode_snapshot(blob)
        assert data["saved_at"] == SAVED_AT
        assert data["session_start_time"] == datetime(2024, 1, 1, 9, 0)
        assert data["active_session"]["last_update_time"] == datetime(2024, 1, 1, 9, 29)
        assert data["active_session_id"] == "s1"
        assert data["last_counted_minute"] == 20
        assert data["current_task"]["title"] == "Write report"

    def test_idle_state_has_no_session(self):
        blob = encode_snapshot(state_to_record(TimerState.initial(TimerSettings())), SAVED_AT)
        data = decode_snapshot(blob)
        assert data["active_session"] is None
        assert data["session_start_time"] is None
        assert data["mode"] == TimerMode.WORK.value

    def test_encode_does_not_mutate_record(self):
        record = state_to_record(_running_state())
        encode_snapshot(record, SAVED_AT)
        assert isinstance(record["active_session"]["start_time"], datetime)

    @pytest.mark.parametrize("blob", [
        "{not json",
        "[]",
        '{"mode": "work"}',
        '{"remaining_seconds": 10, "active_session": {"task_id": "t1"}}',
        '{"remaining_seconds": 10, "saved_at": "yesterday"}',
    ])
    def test_corrupted_blobs(self, blob):
        with pytest.raises(SnapshotCorruptedError):
            decode_snapshot(blob)


class TestTimestamps:

    def test_round_trip(self):
        assert decode_timestamp(encode_timestamp(SAVED_AT)) == SAVED_AT

    def test_missing_reads_as_never(self):
        assert decode_timestamp(None) is None
        assert decode_timestamp("") is None

    def test_junk_reads_as_never(self, caplog):
        assert decode_timestamp("last tuesday") is None
        assert "unparsable timestamp" in caplog.text


# ═══════════════════════════════════════════════════════════════════════════
#  STORES
# ═══════════════════════════════════════════════════════════════════════════


class TestMemoryStore:

    def test_get_set_remove(self):
        store = MemorySnapshotStore()
        assert store.get(TIMER_STATE_KEY) is None
        store.set(TIMER_STATE_KEY, "{}")
        assert store.get(TIMER_STATE_KEY) == "{}"
        store.remove(TIMER_STATE_KEY)
        store.remove(TIMER_STATE_KEY)
        assert store.get(TIMER_STATE_KEY) is None


class TestFileStore:

    def test_creates_directory_on_first_write(self, tmp_path):
        store = FileSnapshotStore(tmp_path / "snapshots")
        store.set(TIMER_STATE_KEY, '{"remaining_seconds": 1}')
        assert (tmp_path / "snapshots" / "timer_state.json").exists()
        assert store.get(TIMER_STATE_KEY) == '{"remaining_seconds": 1}'

    def test_overwrite_leaves_no_temp_file(self, tmp_path):
        store = FileSnapshotStore(tmp_path)
        store.set(TIMER_STATE_KEY, "a")
        store.set(TIMER_STATE_KEY, "b")
        assert store.get(TIMER_STATE_KEY) == "b"
        assert [p.name for p in tmp_path.iterdir()] == ["timer_state.json"]

    def test_missing_key(self, tmp_path):
        store = FileSnapshotStore(tmp_path)
        assert store.get(TIMER_STATE_KEY) is None
        store.remove(TIMER_STATE_KEY)

    def test_remove(self, tmp_path):
        store = FileSnapshotStore(tmp_path)
        store.set(TIMER_STATE_KEY, "x")
        store.remove(TIMER_STATE_KEY)
        assert store.get(TIMER_STATE_KEY) is None

    @pytest.mark.parametrize("key", ["../escape", "a/b", ""])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        store = FileSnapshotStore(tmp_path)
        with pytest.raises(ValueError):
            store.set(key, "x")

    def test_unwritable_directory_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = FileSnapshotStore(blocker / "snapshots")
        store.set(TIMER_STATE_KEY, "x")
        assert "Could not write snapshot" in caplog.text
