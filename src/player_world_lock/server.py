"""FastAPI lock service exposing a LockProvider over HTTP."""

from __future__ import annotations

import logging
import os
from typing import Dict

from fastapi import FastAPI, HTTPException, Response, status
from pydantic import BaseModel

from .errors import ProtocolViolation, TransientError, UnsafeIdentifierError
from .identifiers import require_safe_identifier
from .models import Owner, PutTransientFailure, Transient, Unclaimed
from .provider import LockProvider

logger = logging.getLogger(__name__)


class PutLockRequest(BaseModel):
    owner: str


def _require_safe(value: str, what: str) -> str:
    try:
        return require_safe_identifier(value, what)
    except UnsafeIdentifierError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _broken_record(player: str, exc: Exception) -> HTTPException:
    logger.error("lock record for %s violates the record protocol: %s", player, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="lock record violates the record protocol",
    )


def _unavailable(player: str, reason: str) -> HTTPException:
    logger.warning("transient failure serving lock for %s: %s", player, reason)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="lock record temporarily unavailable",
    )


def create_app(provider: LockProvider) -> FastAPI:
    app = FastAPI(title="Player World Lock Service")

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/locks/{player}")
    def get_lock(player: str) -> Dict[str, str]:
        _require_safe(player, "player name")
        try:
            result = provider.check(player)
        except ProtocolViolation as exc:
            raise _broken_record(player, exc) from exc
        except TransientError as exc:
            raise _unavailable(player, str(exc)) from exc

        if isinstance(result, Owner):
            return {"status": "owned", "owner": result.instance}
        if isinstance(result, Unclaimed):
            return {"status": "unclaimed"}
        if isinstance(result, Transient):
            raise _unavailable(player, result.reason)
        raise _broken_record(player, ProtocolViolation(f"unexpected check result {result!r}"))

    @app.put("/locks/{player}", status_code=status.HTTP_204_NO_CONTENT)
    def put_lock(player: str, body: PutLockRequest) -> Response:
        _require_safe(player, "player name")
        _require_safe(body.owner, "owner instance name")
        try:
            outcome = provider.put(player, body.owner)
        except TransientError as exc:
            raise _unavailable(player, str(exc)) from exc
        if isinstance(outcome, PutTransientFailure):
            raise _unavailable(player, outcome.reason)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def serve(provider: LockProvider, host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    uvicorn.run(
        create_app(provider),
        host=host or os.getenv("PLAYER_WORLD_LOCK_HOST", "0.0.0.0"),
        port=port or int(os.getenv("PLAYER_WORLD_LOCK_PORT", "8000")),
    )
