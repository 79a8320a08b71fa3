"""One-second heartbeat that drives ``TimerEngine.tick``.

The heartbeat follows the engine: it runs while the engine reports a
running countdown on the active device and stops otherwise, so an idle
or observing device never ticks.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QTimer

from .engine import TimerEngine
from .state import TimerState

logger = logging.getLogger("focusledger.heartbeat")

TICK_INTERVAL_MS = 1000


class Heartbeat(QObject):
    def __init__(
        self,
        engine: TimerEngine,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(engine.tick)
        engine.changed.connect(self._on_state_changed)

    @property
    def is_active(self) -> bool:
        return self._qt_timer.isActive()

    def _on_state_changed(self, state: TimerState) -> None:
        should_run = state.is_running and state.is_active_device
        if should_run and not self._qt_timer.isActive():
            logger.debug("Heartbeat started")
            self._qt_timer.start()
        elif not should_run and self._qt_timer.isActive():
            logger.debug("Heartbeat stopped")
            self._qt_timer.stop()

    def stop(self) -> None:
        self._qt_timer.stop()
