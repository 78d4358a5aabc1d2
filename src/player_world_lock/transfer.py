"""Move a connected player to another instance and disconnect them."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .errors import ProtocolViolation, TransientError, UnknownPlayerError
from .host import GameHost, PlayerHandle
from .identifiers import require_safe_identifier
from .models import PutSuccess, PutTransientFailure
from .provider import LockProvider

logger = logging.getLogger(__name__)


def transfer_message(description: str) -> str:
    return f"You are being transferred to another server. Please connect to: {description}"


class TransferService:
    """Reassign ownership of a live player, then kick them with a redirect.

    Only for trusted in-process callers. Nothing is disconnected unless the
    target is valid, the handle is a connected player and the record was
    written.
    """

    def __init__(
        self,
        provider: LockProvider,
        host: GameHost,
        friendly_name: Optional[Callable[[str], str]] = None,
    ):
        self.provider = provider
        self.host = host
        self.friendly_name = friendly_name or (lambda name: name)

    def transfer_and_kick(self, player_handle: PlayerHandle, new_owner: str) -> None:
        require_safe_identifier(new_owner, "new_owner")
        player = self._connected(player_handle)

        name = require_safe_identifier(player.get_player_name(), "player name")
        outcome = self.provider.put(name, new_owner)
        if isinstance(outcome, PutTransientFailure):
            raise TransientError(f"could not transfer {name} to {new_owner}: {outcome.reason}")
        if not isinstance(outcome, PutSuccess):
            raise ProtocolViolation(f"LockProvider.put() contract error: returned {outcome!r}")

        logger.info("transferred player %s to instance %s", name, new_owner)
        self.host.kick_player(name, transfer_message(self.friendly_name(new_owner)))

    def _connected(self, player_handle: PlayerHandle) -> PlayerHandle:
        # Identity, not name: a stale handle may share a name with a new player.
        for ref in self.host.get_connected_players():
            if ref is player_handle:
                return ref
        raise UnknownPlayerError(f"object {player_handle!r} was not a real player!")
