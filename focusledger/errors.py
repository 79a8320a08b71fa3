"""Exception hierarchy for FocusLedger."""


class FocusLedgerError(Exception):
    """Base exception for FocusLedger."""


class SettingsError(FocusLedgerError):
    """Raised when timer settings are out of range."""


class SessionStoreError(FocusLedgerError):
    """Raised when the durable session store cannot complete a call."""


class SessionNotFoundError(SessionStoreError):
    """Raised when a write targets a work session id that does not exist."""


class SnapshotCorruptedError(FocusLedgerError):
    """Raised when a local snapshot blob cannot be decoded."""
