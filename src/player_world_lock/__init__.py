"""Keep each player on exactly one server instance of a shared world group."""

from .errors import (
    CapabilityMisuseError,
    ConfigurationError,
    ProtocolViolation,
    TransientError,
    UnknownPlayerError,
    UnsafeIdentifierError,
    WorldLockError,
)
from .models import Owner, PutSuccess, PutTransientFailure, Transient, Unclaimed
from .provider import LockProvider
from .registry import ProviderRegistry, register_backend

__version__ = "0.1.0"
__all__ = [
    "CapabilityMisuseError",
    "ConfigurationError",
    "LockProvider",
    "Owner",
    "ProtocolViolation",
    "ProviderRegistry",
    "PutSuccess",
    "PutTransientFailure",
    "Transient",
    "TransientError",
    "Unclaimed",
    "UnknownPlayerError",
    "UnsafeIdentifierError",
    "WorldLockError",
    "register_backend",
]
