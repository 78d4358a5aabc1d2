"""Admission decisions for players connecting to this instance."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .errors import ProtocolViolation, TransientError
from .identifiers import SAFE_CHARSET_DISPLAY, is_safe_identifier
from .models import Owner, PutSuccess, PutTransientFailure, Transient, Unclaimed
from .provider import LockProvider

logger = logging.getLogger(__name__)

TRANSIENT_MESSAGE = (
    "There was a temporary problem checking your player's world lock. "
    "Please try again later."
)
UNSAFE_NAME_MESSAGE = (
    "Sorry, but your username is not currently supported for world locks. "
    f"Please ensure your name belongs to the safe character set, e.g. {SAFE_CHARSET_DISPLAY}"
)
UNCLAIMED_MESSAGE = "You have not connected to the starting server in this group yet!"


def locked_out_message(description: str) -> str:
    return (
        "You have not connected to the correct dimensional server. "
        f"Please connect to this server instead: {description}"
    )


class JoinGate:
    """Decide whether a connecting player may join this instance.

    ``on_prejoin`` returns None to allow the join, or the denial text to show
    the player. Protocol violations raised by the provider propagate.
    """

    def __init__(
        self,
        provider: LockProvider,
        current_instance: str,
        *,
        is_lock_master: bool = False,
        friendly_name: Optional[Callable[[str], str]] = None,
        provider_name: str = "?",
    ):
        self.provider = provider
        self.current_instance = current_instance
        self.is_lock_master = is_lock_master
        self.friendly_name = friendly_name or (lambda name: name)
        self.provider_name = provider_name

    def on_prejoin(self, name: str, ip: Optional[str] = None) -> Optional[str]:
        if not name or not is_safe_identifier(name):
            return UNSAFE_NAME_MESSAGE

        try:
            result = self.provider.check(name)
        except TransientError as exc:
            result = Transient(str(exc))

        if isinstance(result, Owner):
            if result.instance == self.current_instance:
                return None
            return locked_out_message(self.friendly_name(result.instance))
        if isinstance(result, Transient):
            self._warn_transient(name, result.reason)
            return TRANSIENT_MESSAGE
        if isinstance(result, Unclaimed):
            logger.info("handling unclaimed player %s", name)
            return self._handle_unclaimed(name)

        raise ProtocolViolation(
            f"LockProvider.check() contract error: provider {self.provider_name!r} "
            f"returned {result!r}"
        )

    __call__ = on_prejoin

    def _handle_unclaimed(self, name: str) -> Optional[str]:
        if not self.is_lock_master:
            return UNCLAIMED_MESSAGE

        try:
            outcome = self.provider.put(name, self.current_instance)
        except TransientError as exc:
            outcome = PutTransientFailure(str(exc))

        if isinstance(outcome, PutSuccess):
            logger.info("claimed player %s for instance %s", name, self.current_instance)
            return None
        if isinstance(outcome, PutTransientFailure):
            self._warn_transient(name, outcome.reason)
            return TRANSIENT_MESSAGE
        raise ProtocolViolation(
            f"LockProvider.put() contract error: provider {self.provider_name!r} "
            f"returned {outcome!r}"
        )

    def _warn_transient(self, name: str, reason: str) -> None:
        logger.warning(
            'transient failure in lock provider "%s" handling player %s: %s',
            self.provider_name,
            name,
            reason,
        )
