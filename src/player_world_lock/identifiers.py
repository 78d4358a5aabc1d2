"""Identifier rules shared by player names and instance names.

Identifiers end up both as file names inside the lock directory and as URL
path segments, so they are restricted to the URL-safe base64 alphabet.
"""

from __future__ import annotations

import re

from .errors import UnsafeIdentifierError

SAFE_IDENTIFIER_PATTERN = re.compile(r"[0-9A-Za-z_-]*")
SAFE_CHARSET_DISPLAY = "0-9, a-z, A-Z, _ and -"


def is_safe_identifier(value: str) -> bool:
    """Return True when every character of ``value`` is in the safe set.

    The empty string matches; callers that need a non-empty name check that
    separately.
    """
    if not isinstance(value, str):
        return False
    return SAFE_IDENTIFIER_PATTERN.fullmatch(value) is not None


def require_safe_identifier(value: str, what: str = "identifier") -> str:
    """Return ``value`` unchanged or raise UnsafeIdentifierError."""
    if not isinstance(value, str):
        raise UnsafeIdentifierError(
            f"{what} expected to be a string, got {type(value).__name__}", value
        )
    if not value:
        raise UnsafeIdentifierError(f"{what} must not be empty", value)
    if not is_safe_identifier(value):
        raise UnsafeIdentifierError(
            f"{what} contained characters outside {SAFE_CHARSET_DISPLAY}: {value!r}",
            value,
        )
    return value
