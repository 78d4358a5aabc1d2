"""Result types returned by lock providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Owner:
    """The player is owned by the named instance."""

    instance: str


@dataclass(frozen=True)
class Unclaimed:
    """No instance owns the player yet."""


@dataclass(frozen=True)
class Transient:
    """The record could not be read reliably right now; retry later."""

    reason: str


CheckResult = Union[Owner, Unclaimed, Transient]


@dataclass(frozen=True)
class PutSuccess:
    pass


@dataclass(frozen=True)
class PutTransientFailure:
    reason: str


PutResult = Union[PutSuccess, PutTransientFailure]

UNCLAIMED = Unclaimed()
PUT_SUCCESS = PutSuccess()
