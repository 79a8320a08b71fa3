"""Run a headless FocusLedger timer: python -m focusledger [task title]."""

import logging
import os
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from .app import build_engine
from .tasks import Task, TaskRegistry
from .timer import Heartbeat


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FOCUSLEDGER_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QCoreApplication(sys.argv)
    app.setApplicationName("FocusLedger")

    tasks = TaskRegistry()
    engine = build_engine(task_lookup=tasks)
    heartbeat = Heartbeat(engine)

    engine.minute_credited.connect(
        lambda task_id, minutes: logging.getLogger("focusledger").info(
            "+%dm on %s", minutes, task_id
        )
    )

    engine.on_auth_changed(os.environ.get("FOCUSLEDGER_USER", "local"))

    title = " ".join(sys.argv[1:]).strip()
    if title:
        task = Task(id=title.lower().replace(" ", "-"), title=title)
        tasks.add(task)
        engine.set_current_task(task)
    engine.start()

    def _shutdown(*_args) -> None:
        engine.pause()
        heartbeat.stop()
        app.quit()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
    # Let the interpreter run signal handlers while the Qt loop is idle.
    wake = QTimer()
    wake.timeout.connect(lambda: None)
    wake.start(500)
    print("FocusLedger running. Press Ctrl+C to pause and exit.")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
