"""Translate instance names into descriptions shown to players."""

from __future__ import annotations

from typing import Mapping, Optional


class FriendlyNames:
    """Look up an instance description, falling back to the name itself."""

    def __init__(self, table: Optional[Mapping[str, str]] = None):
        self._table = dict(table or {})

    def __call__(self, instance_name: str) -> str:
        return self._table.get(instance_name) or instance_name

    def __len__(self) -> int:
        return len(self._table)
