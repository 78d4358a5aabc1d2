"""Scoped file access for backends that keep lock records in a directory.

The broker turns the unrestricted ``open`` into a callable that can only
touch ``<lockdir>/<name>.txt`` for a safe ``name``. Backends receive the
scoped callable and never see the directory path as something they could
join arbitrary names onto.

Symlinks placed inside the lock directory by other programs are not
detected.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, Any, Callable, Optional

from .errors import CapabilityMisuseError, ConfigurationError
from .identifiers import SAFE_CHARSET_DISPLAY, is_safe_identifier

RECORD_SUFFIX = ".txt"

Opener = Callable[[str, str], IO[Any]]


class LockdirOpen:
    """Open ``<name>.txt`` inside one lock directory; the mode is mandatory."""

    __slots__ = ("_lockdir", "_open")

    def __init__(self, lockdir: str, inner_open: Opener):
        self._lockdir = lockdir
        self._open = inner_open

    def _path_for(self, name: str) -> str:
        return os.path.join(self._lockdir, name + RECORD_SUFFIX)

    def __call__(self, name: str, mode: Optional[str] = None) -> IO[Any]:
        # name is validated upstream as well; checked again here.
        self._check_name(name)
        if not mode:
            raise CapabilityMisuseError("lockdir_open(): open mode must be explicit.")
        return self._open(self._path_for(name), mode)

    @staticmethod
    def _check_name(name: str) -> None:
        if not isinstance(name, str) or not name or not is_safe_identifier(name):
            raise CapabilityMisuseError(
                "lockdir_open(): passed name contained a character outside "
                f"the safe set ({SAFE_CHARSET_DISPLAY})."
            )

    def __repr__(self) -> str:
        return "LockdirOpen(<scoped>)"


def broker(lockdir: str | Path | None, inner_open: Opener | None = None) -> LockdirOpen:
    """Validate ``lockdir`` once and return an opener scoped to it.

    ``inner_open`` defaults to the builtin ``open``; only the returned object
    keeps a reference to it.
    """
    if lockdir is None or str(lockdir).strip() == "":
        raise ConfigurationError("lockdir was blank or not set.")
    path = Path(lockdir).expanduser()
    if not path.is_dir():
        raise ConfigurationError(f"lock directory {path} does not exist or is not a directory.")
    return LockdirOpen(str(path.resolve()), inner_open or open)
