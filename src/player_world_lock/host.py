"""Interfaces the game server host provides to player world locks."""

from __future__ import annotations

from typing import Iterable, Protocol


class PlayerHandle(Protocol):
    def get_player_name(self) -> str: ...


class GameHost(Protocol):
    def get_connected_players(self) -> Iterable[PlayerHandle]: ...

    def kick_player(self, name: str, reason: str) -> None: ...
