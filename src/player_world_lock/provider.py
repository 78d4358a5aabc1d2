"""The lock provider interface that every backend implements."""

from __future__ import annotations

import abc

from .models import CheckResult, PutResult


class LockProvider(abc.ABC):
    """Looks up and records which instance owns a player.

    ``check`` returns ``Owner``, ``Unclaimed`` or ``Transient`` and only raises
    for conditions that need operator attention (protocol violations, I/O
    errors other than a missing record). ``put`` overwrites the record; callers
    only invoke it when the current instance already owns the player or is the
    lock master claiming an unclaimed one.
    """

    @abc.abstractmethod
    def check(self, player: str) -> CheckResult: ...

    @abc.abstractmethod
    def put(self, player: str, owner: str) -> PutResult: ...

    def close(self) -> None:
        """Release resources held by the backend; a no-op unless overridden."""
