"""Lock provider that talks to the HTTP lock service in ``server.py``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

import httpx

from .errors import ConfigurationError, ProtocolViolation, UnsafeIdentifierError, WorldLockError
from .identifiers import is_safe_identifier, require_safe_identifier
from .models import PUT_SUCCESS, UNCLAIMED, CheckResult, Owner, PutResult, PutTransientFailure, Transient
from .provider import LockProvider

if TYPE_CHECKING:
    from .config import HostSettings
    from .registry import ProviderRegistry


class HttpLockProvider(LockProvider):
    """LockProvider for a remote lock service.

    Network errors and 503 responses are transient; 500 responses mean the
    service found a broken record and are raised as protocol violations.
    """

    def __init__(
        self,
        base_url: str,
        current_instance: str,
        log: logging.Logger,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.current_instance = current_instance
        self._log = log
        self.client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def _url(self, player: str) -> str:
        return f"/locks/{player}"

    def check(self, player: str) -> CheckResult:
        require_safe_identifier(player, "player name")
        try:
            response = self.client.get(self._url(player))
        except httpx.RequestError as exc:
            reason = f"network error checking {player}: {exc}"
            self._log.warning(reason)
            return Transient(reason)

        if response.status_code == 503:
            reason = f"lock service reported a transient failure for {player}"
            self._log.warning(reason)
            return Transient(reason)
        self._raise_for_status(response, player)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolViolation("lock service returned invalid JSON", self._url(player)) from exc

        status = data.get("status") if isinstance(data, dict) else None
        if status == "unclaimed":
            return UNCLAIMED
        if status == "owned":
            owner = data.get("owner")
            if isinstance(owner, str) and owner and is_safe_identifier(owner):
                return Owner(owner)
        raise ProtocolViolation(f"unexpected lock service payload {data!r}", self._url(player))

    def put(self, player: str, owner: str) -> PutResult:
        require_safe_identifier(player, "player name")
        require_safe_identifier(owner, "owner instance name")
        try:
            response = self.client.put(self._url(player), json={"owner": owner})
        except httpx.RequestError as exc:
            reason = f"network error writing {player}: {exc}"
            self._log.warning(reason)
            return PutTransientFailure(reason)

        if response.status_code == 503:
            return PutTransientFailure(f"lock service reported a transient failure for {player}")
        self._raise_for_status(response, player)
        return PUT_SUCCESS

    def _raise_for_status(self, response: httpx.Response, player: str) -> None:
        code = response.status_code
        if code < 400:
            return
        if code == 400:
            raise UnsafeIdentifierError(f"lock service rejected identifier for {player}", player)
        if code == 500:
            raise ProtocolViolation("lock service reported a broken record", self._url(player))
        raise WorldLockError(f"lock service returned HTTP {code} for {player}")

    def close(self) -> None:
        self.client.close()

    def __repr__(self) -> str:
        return f"HttpLockProvider({self.base_url!r})"


def http_constructor(settings: "HostSettings") -> Callable[[str, logging.Logger], LockProvider]:
    base_url = settings.service_url
    timeout = settings.http_timeout

    def construct(current_instance: str, log: logging.Logger) -> LockProvider:
        if not base_url:
            raise ConfigurationError("service_url was blank or not set.")
        return HttpLockProvider(base_url, current_instance, log, timeout=timeout)

    return construct


def register(registry: "ProviderRegistry", settings: "HostSettings") -> None:
    """Plugin hook: add the ``http`` backend."""
    registry.register("http", http_constructor(settings))
