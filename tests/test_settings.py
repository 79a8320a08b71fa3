"""Tests for timer settings and engine configuration persistence."""

import json

import pytest

from focusledger.errors import SettingsError
from focusledger.settings import (
    EngineConfig,
    TimerSettings,
    load_settings,
    save_settings,
    settings_from_dict,
)
from focusledger.timer.state import TimerMode


class TestTimerSettings:

    def test_defaults(self):
        s = TimerSettings()
        assert (s.work, s.short_break, s.long_break) == (25, 5, 15)
        assert s.long_break_interval == 4
        assert s.auto_start_breaks is False
        assert s.auto_start_pomodoros is False

    def test_seconds_per_mode(self):
        s = TimerSettings(work=50, short_break=10, long_break=30)
        assert s.seconds_for(TimerMode.WORK) == 3000
        assert s.seconds_for(TimerMode.SHORT_BREAK) == 600
        assert s.seconds_for("longBreak") == 1800

    def test_unknown_mode(self):
        with pytest.raises(SettingsError):
            TimerSettings().minutes_for("nap")

    @pytest.mark.parametrize("field", ["work", "short_break", "long_break", "long_break_interval"])
    def test_rejects_zero(self, field):
        with pytest.raises(SettingsError):
            TimerSettings(**{field: 0}).validate()

    def test_from_dict_ignores_unknown_keys(self):
        s = settings_from_dict({"work": 45, "theme": "dark"})
        assert s.work == 45
        assert s.short_break == 5

    def test_from_dict_of_junk_is_defaults(self):
        assert settings_from_dict(None) == TimerSettings()


class TestPersistence:

    def test_missing_file_gives_defaults(self, tmp_path):
        settings, config = load_settings(tmp_path / "settings.json")
        assert settings == TimerSettings()
        assert config == EngineConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        save_settings(
            TimerSettings(work=40, auto_start_breaks=True),
            EngineConfig(remote_sync_interval_seconds=60, task_lookup_attempts=3),
            path,
        )
        settings, config = load_settings(path)
        assert settings.work == 40
        assert settings.auto_start_breaks is True
        assert config.remote_sync_interval_seconds == 60
        assert config.task_lookup_attempts == 3
        assert config.orphan_after_seconds == 180

    def test_file_layout(self, tmp_path):
        path = tmp_path / "settings.json"
        save_settings(TimerSettings(), path=path)
        data = json.loads(path.read_text())
        assert set(data) == {"timer", "engine"}
        assert data["timer"]["long_break_interval"] == 4

    def test_unreadable_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{broken")
        settings, config = load_settings(path)
        assert settings == TimerSettings()
        assert "Ignoring unreadable settings" in caplog.text

    def test_invalid_values_give_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"timer": {"work": 0}}))
        settings, _ = load_settings(path)
        assert settings.work == 25

    def test_unknown_engine_keys_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"engine": {"orphan_after_seconds": 600, "color": "red"}}))
        _, config = load_settings(path)
        assert config.orphan_after_seconds == 600
