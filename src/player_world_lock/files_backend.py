"""Lock records stored as one text file per player in a shared directory.

Each record is exactly ``<owner>\\n``. Writers write the owner and the
newline as two separate writes without renaming or syncing, so a reader may
catch a file before its newline lands; that case is reported as transient
instead of as corruption. A reader can still see a complete previous record
while a writer is mid-overwrite. Only one instance may be lock master, which
keeps such races rare.

Owner lines must be safe identifiers in UTF-8; a hand-edited record using
any other characters is a protocol violation, not an owner.

Caveats:
1) The directory can become cluttered with many players.
2) Instances running as different OS users may be unable to overwrite each
   other's files, which surfaces as hard I/O errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Tuple

from .errors import ConfigurationError, ProtocolViolation
from .identifiers import is_safe_identifier, require_safe_identifier
from .lockdir import RECORD_SUFFIX, LockdirOpen, broker
from .models import PUT_SUCCESS, UNCLAIMED, CheckResult, Owner, PutResult, Transient
from .provider import LockProvider

if TYPE_CHECKING:
    from .config import HostSettings
    from .registry import ProviderRegistry

WORLDDIR_LOCK_SUBDIR = "player_locks"

logger = logging.getLogger(__name__)


def split_record(data: bytes) -> Tuple[bytes, bool, bytes]:
    """Split raw record bytes into (first line, newline seen, remainder)."""
    first_line, newline, remainder = data.partition(b"\n")
    return first_line, bool(newline), remainder


def parse_record(data: bytes, path: str = "<record>") -> CheckResult:
    """Interpret the raw contents of a record file.

    Raises ProtocolViolation for extra lines, an empty owner, or an owner
    that is not a safe identifier.
    """
    first_line, has_newline, remainder = split_record(data)

    if remainder:
        raise ProtocolViolation("spurious extra lines.", path)

    if not has_newline:
        # Missing newline means a half-written file, empty or not.
        return Transient(
            f"newline character not present in {path}, is the file half written?"
        )

    if not first_line:
        raise ProtocolViolation("empty line.", path)

    try:
        owner = first_line.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProtocolViolation("owner name is not valid UTF-8.", path) from exc
    if not is_safe_identifier(owner):
        raise ProtocolViolation(f"owner name {owner!r} is not a safe identifier.", path)
    return Owner(owner)


class FileLockProvider(LockProvider):
    """LockProvider backed by ``<lockdir>/<player>.txt`` files."""

    def __init__(self, current_instance: str, log: logging.Logger, lockdir_open: LockdirOpen):
        self.current_instance = current_instance
        self._log = log
        self._open = lockdir_open

    def check(self, player: str) -> CheckResult:
        require_safe_identifier(player, "player name")
        path = player + RECORD_SUFFIX
        try:
            handle = self._open(player, "rb")
        except FileNotFoundError:
            return UNCLAIMED
        # Any other OSError (permissions, a directory in the way) propagates.
        with handle:
            data = handle.read()

        result = parse_record(data, path)
        if isinstance(result, Transient):
            self._log.warning(result.reason)
        return result

    def put(self, player: str, owner: str) -> PutResult:
        require_safe_identifier(player, "player name")
        require_safe_identifier(owner, "owner instance name")
        with self._open(player, "wb") as handle:
            handle.write(owner.encode("utf-8"))
            handle.write(b"\n")
        return PUT_SUCCESS

    def __repr__(self) -> str:
        return f"FileLockProvider({self.current_instance!r})"


def files_constructor(settings: "HostSettings") -> Callable[[str, logging.Logger], LockProvider]:
    """Constructor for the ``files`` backend using the shared ``lockdir`` setting."""

    lockdir = settings.lockdir

    def construct(current_instance: str, log: logging.Logger) -> LockProvider:
        return FileLockProvider(current_instance, log, broker(lockdir))

    return construct


def worlddir_constructor(settings: "HostSettings") -> Callable[[str, logging.Logger], LockProvider]:
    """Constructor for the ``worlddir`` backend, kept under ``<world>/player_locks``."""

    world_path = Path(settings.world_path)

    def construct(current_instance: str, log: logging.Logger) -> LockProvider:
        lockdir = world_path / WORLDDIR_LOCK_SUBDIR
        if not lockdir.is_dir():
            raise ConfigurationError(
                f"directory {WORLDDIR_LOCK_SUBDIR} doesn't exist inside world directory {world_path}."
            )
        return FileLockProvider(current_instance, log, broker(lockdir))

    return construct


def register(registry: "ProviderRegistry", settings: "HostSettings") -> None:
    """Plugin hook: add the ``files`` and ``worlddir`` backends."""
    registry.register("files", files_constructor(settings))
    registry.register("worlddir", worlddir_constructor(settings))
