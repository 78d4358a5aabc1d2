"""Exception classes for player world locks."""

from __future__ import annotations


class WorldLockError(Exception):
    """Base exception for all player world lock errors."""
    pass


class ConfigurationError(WorldLockError):
    """Raised at startup when settings or backend registration are invalid."""
    pass


class ProtocolViolation(WorldLockError):
    """Raised when a stored lock record breaks the one-line record protocol."""

    def __init__(self, message: str, path: str | None = None):
        if path is not None:
            message = f"protocol violation in {path}: {message}"
        super().__init__(message)
        self.path = path


class TransientError(WorldLockError):
    """Raised by backends for recoverable failures that should be retried later."""
    pass


class UnsafeIdentifierError(WorldLockError, ValueError):
    """Raised when a name falls outside the safe identifier character set."""

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


class CapabilityMisuseError(WorldLockError):
    """Raised when the scoped lock directory opener is called out of contract."""
    pass


class UnknownPlayerError(WorldLockError, ValueError):
    """Raised when a transfer is requested for a handle that is not a connected player."""
    pass
