"""FocusLedger: Pomodoro timer and work-session accounting engine."""

__version__ = "0.1.0"
