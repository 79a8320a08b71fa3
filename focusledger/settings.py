"""Timer settings and engine configuration with JSON persistence.

Settings are stored at:
    $FOCUSLEDGER_HOME/settings.json   (default ~/.focusledger)

The file has two sections::

    {
      "timer":  {"work": 25, "short_break": 5, "long_break": 15, ...},
      "engine": {"remote_sync_interval_seconds": 300, ...}
    }

Usage::

    settings, config = load_settings()
    settings.work = 50
    save_settings(settings, config)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any

from .errors import SettingsError

logger = logging.getLogger("focusledger.settings")


APP_SUPPORT_DIR = Path(
    os.environ.get("FOCUSLEDGER_HOME", Path.home() / ".focusledger")
)
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class TimerSettings:
    """Per-mode durations (minutes) and auto-start policy."""

    work: int = 25
    short_break: int = 5
    long_break: int = 15
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False
    long_break_interval: int = 4

    def minutes_for(self, mode: Any) -> int:
        """Duration in minutes for a ``TimerMode`` (or its string value)."""
        key = getattr(mode, "value", mode)
        if key == "work":
            return self.work
        if key == "shortBreak":
            return self.short_break
        if key == "longBreak":
            return self.long_break
        raise SettingsError(f"unknown timer mode: {mode!r}")

    def seconds_for(self, mode: Any) -> int:
        return self.minutes_for(mode) * 60

    def validate(self) -> "TimerSettings":
        for name in ("work", "short_break", "long_break"):
            if int(getattr(self, name)) < 1:
                raise SettingsError(f"{name} must be at least 1 minute")
        if int(self.long_break_interval) < 1:
            raise SettingsError("long_break_interval must be at least 1")
        return self


@dataclass
class EngineConfig:
    """Knobs for persistence cadence and recovery."""

    # ── durable tier ──────────────────────────────────────────────────
    remote_sync_interval_seconds: int = 5 * 60   # min gap between remote reads
    orphan_after_seconds: int = 3 * 60            # idle active rows → orphaned
    database_url: str = ""                        # empty → sqlite file in APP_SUPPORT_DIR

    # ── task lookup retry ─────────────────────────────────────────────
    task_lookup_attempts: int = 5
    task_lookup_base_delay_ms: int = 250          # doubles per attempt


def _filtered(cls, data: Any) -> dict:
    if not isinstance(data, dict):
        return {}
    valid_keys = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_keys}


def settings_from_dict(data: Any) -> TimerSettings:
    """Build validated ``TimerSettings`` from a dict, ignoring unknown keys."""
    return TimerSettings(**_filtered(TimerSettings, data)).validate()


def load_settings(path: Path | None = None) -> tuple[TimerSettings, EngineConfig]:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return (
                settings_from_dict(data.get("timer", {})),
                EngineConfig(**_filtered(EngineConfig, data.get("engine", {}))),
            )
    except (OSError, ValueError, TypeError, SettingsError) as exc:
        logger.warning("Ignoring unreadable settings at %s: %s", path, exc)
    return TimerSettings(), EngineConfig()


def save_settings(
    settings: TimerSettings,
    config: EngineConfig | None = None,
    path: Path | None = None,
) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "timer": asdict(settings),
        "engine": asdict(config or EngineConfig()),
    }
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
